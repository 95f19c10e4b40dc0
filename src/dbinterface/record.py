"""
Record types and their column bindings.

A record type is a dataclass deriving from Table. Fields declared with
column() map to a database column of the given name; every other field
is invisible to queries and materialization.

    @dataclass
    class User(Table):
        __tablename__ = "users"

        name: str | None = column("name")
        display_name: str = ""  # not mapped
"""

import dataclasses
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, ClassVar, Mapping, TypeVar

from dbinterface.errors import RecordDefinitionError, SchemaMismatch

COLUMN = "dbinterface.column"

T = TypeVar("T", bound="Table")

_registry: list[type] = []


def column(name: str, default: Any = None, default_factory: Callable[[], Any] = None, **kwargs):
    """Declare a dataclass field bound to the column `name`."""
    metadata = {**kwargs.pop("metadata", {}), COLUMN: name}
    if default_factory is not None:
        return dataclasses.field(default_factory=default_factory, metadata=metadata, **kwargs)
    return dataclasses.field(default=default, metadata=metadata, **kwargs)


@dataclass
class Table:
    """
    Base for every record type.

    Subclasses set __tablename__; a class that leaves it empty is treated
    as an abstract base and is not cached. __identity__ names the primary
    key column used to target updates and deletes.
    """

    __tablename__: ClassVar[str] = ""
    __identity__: ClassVar[str] = "id"

    id: int = column("id", default=0)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        # @dataclass(slots=True) builds a new class and runs this hook again
        for i, known in enumerate(_registry):
            if (known.__module__, known.__qualname__) == (cls.__module__, cls.__qualname__):
                _registry[i] = cls
                return
        _registry.append(cls)

    @property
    def table_name(self) -> str:
        return type(self).__tablename__

    @property
    def identity(self) -> Any:
        return identity_binding(type(self)).get(self)


def registered_tables() -> list[type]:
    """All Table subclasses defined so far, in definition order."""
    return list(_registry)


@dataclass(frozen=True)
class FieldBinding:
    column: str
    attribute: str
    type: Any

    def get(self, record: Any) -> Any:
        return getattr(record, self.attribute)

    def set(self, record: Any, value: Any) -> None:
        setattr(record, self.attribute, value)


@lru_cache(maxsize=None)
def resolve(record_type: type) -> tuple[FieldBinding, ...]:
    """
    Return the column bindings of `record_type` in declaration order.

    Inherited fields come first. A type without any column() fields
    yields an empty tuple.

    Raises:
        RecordDefinitionError: if the type is not a dataclass or two
            fields bind the same column
    """
    if not dataclasses.is_dataclass(record_type):
        raise RecordDefinitionError(f"{record_type!r} is not a dataclass")

    bindings = []
    seen = set()
    for f in dataclasses.fields(record_type):
        name = f.metadata.get(COLUMN)
        if name is None:
            continue
        if name in seen:
            raise RecordDefinitionError(
                f"{record_type.__name__} binds column '{name}' more than once"
            )
        seen.add(name)
        bindings.append(FieldBinding(column=name, attribute=f.name, type=f.type))
    return tuple(bindings)


def identity_binding(record_type: type) -> FieldBinding:
    """The binding of the identity column of `record_type`."""
    identity = getattr(record_type, "__identity__", "id")
    for binding in resolve(record_type):
        if binding.column == identity:
            return binding
    raise RecordDefinitionError(
        f"{record_type.__name__} has no field bound to identity column '{identity}'"
    )


def materialize(record_type: type[T], row: Mapping[str, Any]) -> T:
    """
    Build a `record_type` instance from one result row.

    The instance is created with no arguments, then each bound field is
    set from its column. NULL columns leave the field as None. Column
    names match case-insensitively, since PostgreSQL folds unquoted
    identifiers to lower case.

    Raises:
        SchemaMismatch: if a bound column is absent from the row
    """
    record = record_type()
    folded = None
    for binding in resolve(record_type):
        key = binding.column
        if key not in row:
            if folded is None:
                folded = {k.lower(): k for k in row}
            key = folded.get(key.lower())
            if key is None:
                raise SchemaMismatch(record_type, binding.column)
        binding.set(record, row[key])
    return record

class DbInterfaceError(Exception):
    """Base class for errors raised by dbinterface itself."""


class RecordDefinitionError(DbInterfaceError):
    """A record type cannot be mapped (not a dataclass, duplicate columns)."""


class SchemaMismatch(DbInterfaceError):
    """A column bound by a record type is missing from a result set."""

    def __init__(self, record_type: type, column: str):
        self.record_type = record_type
        self.column = column
        super().__init__(
            f"Column '{column}' declared by {record_type.__name__} "
            "is not present in the result set"
        )


class CacheTypeMismatch(DbInterfaceError):
    """Cached rows for a table were requested as the wrong record type."""

    def __init__(self, table: str, requested: type, actual: type):
        self.table = table
        self.requested = requested
        self.actual = actual
        super().__init__(
            f"Table '{table}' is cached as {actual.__name__}, "
            f"not {requested.__name__}"
        )

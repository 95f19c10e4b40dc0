"""
dbinterface

Maps rows of single tables to dataclass records, runs generic CRUD
against them and keeps a whole-table cache.
"""

from dbinterface.cache import TableCache
from dbinterface.config import ConnectionDescriptor
from dbinterface.errors import (
    CacheTypeMismatch,
    DbInterfaceError,
    RecordDefinitionError,
    SchemaMismatch,
)
from dbinterface.interface import Database, initialize
from dbinterface.query import QueryExecutor, sanitize
from dbinterface.record import FieldBinding, Table, column, materialize, registered_tables, resolve

__all__ = [
    "CacheTypeMismatch",
    "ConnectionDescriptor",
    "Database",
    "DbInterfaceError",
    "FieldBinding",
    "QueryExecutor",
    "RecordDefinitionError",
    "SchemaMismatch",
    "Table",
    "TableCache",
    "column",
    "initialize",
    "materialize",
    "registered_tables",
    "resolve",
    "sanitize",
]

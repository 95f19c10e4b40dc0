from typing import Any, List, Optional, TypeVar

import structlog

from dbinterface import db
from dbinterface.cache import TableCache
from dbinterface.config import ConnectionDescriptor
from dbinterface.query import QueryExecutor
from dbinterface.record import Table

logger = structlog.get_logger()

T = TypeVar("T", bound=Table)


class Database:
    """
    Entry point for data access: CRUD through a QueryExecutor plus a
    TableCache, both bound to one ConnectionDescriptor.
    """

    def __init__(self, descriptor: ConnectionDescriptor, record_types=None):
        self.descriptor = descriptor
        self.executor = QueryExecutor(descriptor)
        self.cache = TableCache(self.executor, record_types)

    def get_connection(self):
        return db.get_connection(self.descriptor)

    def get(self, record_type: type[T], table: str, column: str, value: Any) -> Optional[T]:
        return self.executor.get_one(record_type, table, column, value)

    def get_list(self, record_type: type[T], table: str, column: str, value: Any,
                 column2: str = None, value2: Any = None) -> List[T]:
        return self.executor.get_list(record_type, table, column, value, column2, value2)

    def get_range(self, record_type: type[T], table: str, column: str, low: Any, high: Any) -> List[T]:
        return self.executor.get_range(record_type, table, column, low, high)

    def get_all(self, record_type: type[T], table: str) -> List[T]:
        return self.executor.get_all(record_type, table)

    def insert(self, record: Table, table: str) -> None:
        self.executor.insert(record, table)

    def update(self, record: Table, table: str) -> bool:
        return self.executor.update(record, table)

    def delete_by_id(self, record: Table, table: str) -> bool:
        return self.executor.delete_by_id(record, table)

    def get_cache(self, table: str, record_type: type[T]) -> Optional[List[T]]:
        return self.cache.get(table, record_type)

    def refresh_cache(self) -> None:
        self.cache.refresh()


def initialize(
    server: str,
    port: str,
    database: str,
    username: str,
    password: str,
    record_types=None,
) -> Database:
    """
    Build the connection descriptor, then load the table cache.

    The password is never logged.
    """
    logger.info("initialize", server=server, port=port, database=database)
    descriptor = ConnectionDescriptor(
        server=server,
        port=str(port),
        database=database,
        username=username,
        password=password,
    )
    instance = Database(descriptor, record_types)
    instance.cache.populate()
    return instance

"""
Generic CRUD over record types.

Table and column names cannot be sent as bind parameters, so they are
passed through sanitize() and interpolated into the statement text.
Values are always bound. Never accept table or column names from
untrusted input: sanitize() is weaker than parameter binding.
"""

from typing import Any, List, Optional, TypeVar

import structlog

from dbinterface import db
from dbinterface.config import ConnectionDescriptor
from dbinterface.record import Table, identity_binding, materialize, resolve

logger = structlog.get_logger()

T = TypeVar("T", bound=Table)


def sanitize(identifier: str) -> str:
    """Escape an identifier for interpolation by doubling single quotes."""
    return identifier.replace("'", "''")


class QueryExecutor:
    """
    Builds and runs single-table statements for any record type.

    Each call opens a new connection and releases it before returning,
    whether it succeeds, finds nothing, or the driver raises. Driver
    errors are not caught.
    """

    def __init__(self, descriptor: ConnectionDescriptor):
        self.descriptor = descriptor

    def get_one(self, record_type: type[T], table: str, column: str, value: Any) -> Optional[T]:
        """
        Get the first row where `column` equals `value`, or None.

        Which row is first when several match is up to the database.
        """
        query = f"SELECT * FROM {sanitize(table)} WHERE {sanitize(column)} = %s"
        logger.debug("query", operation="get_one", table=table)
        row = db.fetch_one(self.descriptor, query, (value,))
        if row is None:
            return None
        return materialize(record_type, row)

    def get_list(
        self,
        record_type: type[T],
        table: str,
        column: str,
        value: Any,
        column2: str = None,
        value2: Any = None,
    ) -> List[T]:
        """Get all rows where `column` equals `value` (and `column2` equals `value2`)."""
        query = f"SELECT * FROM {sanitize(table)} WHERE {sanitize(column)} = %s"
        params = [value]

        if column2 is not None:
            query += f" AND {sanitize(column2)} = %s"
            params.append(value2)

        logger.debug("query", operation="get_list", table=table)
        return self._fetch(record_type, query, tuple(params))

    def get_range(
        self, record_type: type[T], table: str, column: str, low: Any, high: Any
    ) -> List[T]:
        """Get all rows where `low <= column <= high`."""
        col = sanitize(column)
        query = f"SELECT * FROM {sanitize(table)} WHERE {col} >= %s AND {col} <= %s"
        logger.debug("query", operation="get_range", table=table)
        return self._fetch(record_type, query, (low, high))

    def get_all(self, record_type: type[T], table: str) -> List[T]:
        """Get every row of `table`."""
        logger.debug("query", operation="get_all", table=table)
        return self._fetch(record_type, f"SELECT * FROM {sanitize(table)}")

    def insert(self, record: Table, table: str) -> None:
        """Insert `record` as a new row, identity column included."""
        bindings = resolve(type(record))
        columns = ", ".join(sanitize(b.column) for b in bindings)
        placeholders = ", ".join("%s" for _ in bindings)
        query = f"INSERT INTO {sanitize(table)} ({columns}) VALUES ({placeholders})"

        logger.debug("query", operation="insert", table=table)
        db.execute(self.descriptor, query, tuple(b.get(record) for b in bindings))

    def update(self, record: Table, table: str) -> bool:
        """
        Write every bound field of `record` to the row with its identity.

        Returns:
            True if at least one row was updated
        """
        bindings = resolve(type(record))
        identity = identity_binding(type(record))
        assignments = ", ".join(f"{sanitize(b.column)} = %s" for b in bindings)
        query = (
            f"UPDATE {sanitize(table)} SET {assignments} "
            f"WHERE {sanitize(identity.column)} = %s"
        )
        params = tuple(b.get(record) for b in bindings) + (identity.get(record),)

        logger.debug("query", operation="update", table=table)
        return db.execute(self.descriptor, query, params) > 0

    def delete_by_id(self, record: Table, table: str) -> bool:
        """
        Delete the row whose identity matches `record`.

        Returns:
            True if a row was deleted
        """
        identity = identity_binding(type(record))
        query = f"DELETE FROM {sanitize(table)} WHERE {sanitize(identity.column)} = %s"

        logger.debug("query", operation="delete_by_id", table=table)
        return db.execute(self.descriptor, query, (identity.get(record),)) > 0

    def _fetch(self, record_type: type[T], query: str, params: tuple = None) -> List[T]:
        rows = db.fetch_all(self.descriptor, query, params)
        return [materialize(record_type, row) for row in rows]

"""
Database connection and query utilities.

Every call opens its own psycopg connection from a ConnectionDescriptor
and releases it before returning; rows come back as dictionaries keyed
by column name.

For testing, use set_connection_override() to inject a connection
that will be used instead of creating new ones. This enables
transaction rollback between tests.
"""

from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.rows import dict_row

from dbinterface.config import ConnectionDescriptor

# =============================================================================
# Connection Override (for testing)
# =============================================================================

_connection_override: psycopg.Connection | None = None


def set_connection_override(conn: psycopg.Connection) -> None:
    """
    Set a connection to use instead of creating new ones.

    Used by test fixtures to ensure all database operations run
    within a single transaction that can be rolled back.

    Args:
        conn: The connection to use for all subsequent operations
    """
    global _connection_override
    _connection_override = conn


def clear_connection_override() -> None:
    """Clear the connection override, restoring normal behavior."""
    global _connection_override
    _connection_override = None


# =============================================================================
# Connection Management
# =============================================================================


@contextmanager
def get_connection(descriptor: ConnectionDescriptor):
    """
    Context manager for database connections.

    In normal operation:
        - Opens a new connection
        - Commits on successful exit
        - Rolls back on exception
        - Closes connection when done

    With override set (testing):
        - Returns the override connection
        - Does NOT commit, rollback, or close
        - Caller (test fixture) manages the transaction

    Usage:
        with get_connection(descriptor) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT ...")
    """
    if _connection_override is not None:
        yield _connection_override
        return

    conn = psycopg.connect(descriptor.conninfo)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def get_cursor(descriptor: ConnectionDescriptor):
    """
    Context manager for a cursor with dict rows.

    Usage:
        with get_cursor(descriptor) as cur:
            cur.execute("SELECT * FROM users")
            rows = cur.fetchall()  # List of dicts
    """
    with get_connection(descriptor) as conn:
        with conn.cursor(row_factory=dict_row) as cur:
            yield cur


# =============================================================================
# Query Helpers
# =============================================================================


def execute(descriptor: ConnectionDescriptor, query: str, params: tuple = None) -> int:
    """
    Execute a query without returning results.

    Use for INSERT, UPDATE, DELETE.

    Args:
        descriptor: Where to connect
        query: SQL query with %s placeholders
        params: Tuple of parameter values

    Returns:
        Number of rows affected
    """
    with get_cursor(descriptor) as cur:
        cur.execute(query, params)
        return cur.rowcount


def fetch_one(
    descriptor: ConnectionDescriptor, query: str, params: tuple = None
) -> dict[str, Any] | None:
    """
    Execute a query and return the first row as dict.

    Args:
        descriptor: Where to connect
        query: SQL query with %s placeholders
        params: Tuple of parameter values

    Returns:
        Dict of column names to values, or None if no row found
    """
    with get_cursor(descriptor) as cur:
        cur.execute(query, params)
        return cur.fetchone()


def fetch_all(
    descriptor: ConnectionDescriptor, query: str, params: tuple = None
) -> list[dict[str, Any]]:
    """
    Execute a query and return all rows as list of dicts.

    Args:
        descriptor: Where to connect
        query: SQL query with %s placeholders
        params: Tuple of parameter values

    Returns:
        List of dicts, empty list if no rows found
    """
    with get_cursor(descriptor) as cur:
        cur.execute(query, params)
        return cur.fetchall()

# src/dbinterface/conftest.py
"""
Pytest configuration and shared fixtures.

Tests are co-located with implementation files using the *_test.py suffix.
Unit tests replace psycopg.connect with a mock; integration tests need a
PostgreSQL database configured through .env.test (DB_SERVER, DB_PORT,
DB_NAME, DB_USERNAME, DB_PASSWORD) and are skipped without one.
"""

import os

# Select .env.test for ConnectionDescriptor.from_env()
os.environ["DBINTERFACE_ENV"] = "test"

from dataclasses import dataclass
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from dbinterface import db
from dbinterface.config import ConnectionDescriptor
from dbinterface.record import Table, column

# =============================================================================
# Record Types
# =============================================================================


@dataclass
class User(Table):
    __tablename__ = "users"

    name: str | None = column("name")
    nickname: str = ""


# =============================================================================
# Mock Driver Fixtures
# =============================================================================


@pytest.fixture
def descriptor() -> ConnectionDescriptor:
    return ConnectionDescriptor(
        server="localhost",
        port="5432",
        database="dbinterface_test",
        username="tester",
        password="s3cret",
    )


@pytest.fixture
def mock_connect():
    """
    Replace psycopg.connect so every call returns the same mock connection.

    The cursor used by the helpers in dbinterface.db is exposed as
    mock_connect.cursor.
    """
    with patch("dbinterface.db.psycopg.connect") as connect:
        conn = MagicMock(name="connection")
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.fetchone.return_value = None
        cursor.fetchall.return_value = []
        cursor.rowcount = 0
        connect.return_value = conn
        connect.conn = conn
        connect.cursor = cursor
        yield connect


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_descriptor() -> ConnectionDescriptor:
    """Descriptor for the integration test database, or skip."""
    try:
        descriptor = ConnectionDescriptor.from_env()
    except KeyError:
        pytest.skip("DB_NAME and DB_USERNAME are not configured")

    try:
        psycopg.connect(descriptor.conninfo).close()
    except psycopg.OperationalError as e:
        pytest.skip(f"Test database unavailable: {e}")

    return descriptor


@pytest.fixture
def db_connection(test_descriptor):
    """
    Provide a database connection with transaction rollback.

    The users table is created inside the test transaction, so rolling
    back at the end removes it again.
    """
    conn = psycopg.connect(test_descriptor.conninfo)

    with conn.cursor() as cur:
        cur.execute("DROP TABLE IF EXISTS users")
        cur.execute("CREATE TABLE users (id int PRIMARY KEY, name varchar(100))")

    # Override the db module to use this connection
    db.set_connection_override(conn)

    yield conn

    # Rollback any changes made during the test
    conn.rollback()
    db.clear_connection_override()
    conn.close()


@pytest.fixture
def sample_users(db_connection) -> list[tuple]:
    """Seed (1, Alice) and (2, Bob)."""
    rows = [(1, "Alice"), (2, "Bob")]
    with db_connection.cursor() as cur:
        for row in rows:
            cur.execute("INSERT INTO users (id, name) VALUES (%s, %s)", row)
    return rows

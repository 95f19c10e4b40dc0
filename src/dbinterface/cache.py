"""
Whole-table read-through cache.

populate() loads every row of every known record type into a fresh
snapshot and swaps it in under a lock, so readers see either the old
snapshot or the complete new one. The cache is not kept in step with
writes; call refresh() after mutating a table to see the change.
"""

import copy
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional, TypeVar

import structlog

from dbinterface.errors import CacheTypeMismatch
from dbinterface.query import QueryExecutor
from dbinterface.record import Table, registered_tables

logger = structlog.get_logger()

T = TypeVar("T", bound=Table)


@dataclass(frozen=True)
class CacheEntry:
    record_type: type
    records: tuple


class TableCache:
    """Snapshot of full tables keyed by table name."""

    def __init__(self, executor: QueryExecutor, record_types: Iterable[type] = None):
        self.executor = executor
        self._record_types = list(record_types) if record_types is not None else None
        self._entries: dict[str, CacheEntry] | None = None
        self._lock = threading.Lock()

    @property
    def record_types(self) -> List[type]:
        if self._record_types is not None:
            return list(self._record_types)
        return registered_tables()

    @property
    def is_populated(self) -> bool:
        return self._entries is not None

    def populate(self) -> None:
        """
        Load every known table and replace the current snapshot.

        A record type without a table name is skipped. If loading any
        table fails the error propagates and the previous snapshot stays
        in place.
        """
        entries = {}
        for record_type in self.record_types:
            table = record_type.__tablename__
            if not table:
                logger.debug("cache_skip_untabled", record_type=record_type.__name__)
                continue
            records = self.executor.get_all(record_type, table)
            entries[table] = CacheEntry(record_type=record_type, records=tuple(records))

        with self._lock:
            self._entries = entries

        logger.info(
            "cache_populated",
            tables=len(entries),
            rows=sum(len(e.records) for e in entries.values()),
        )

    def refresh(self) -> None:
        """
        Discard the snapshot and load it again.

        The old snapshot is replaced in one step once the new one is
        complete, so readers never observe an empty cache in between.
        """
        self.populate()

    def get(self, table: str, record_type: type[T]) -> Optional[List[T]]:
        """
        Return the cached rows of `table`, or None if it is not cached.

        The records are shallow copies; changing them leaves the snapshot
        untouched.

        Raises:
            CacheTypeMismatch: if the table was cached as another type
        """
        with self._lock:
            entries = self._entries or {}
        entry = entries.get(table)
        if entry is None:
            logger.info("cache_miss", table=table)
            return None
        if not issubclass(entry.record_type, record_type):
            raise CacheTypeMismatch(table, record_type, entry.record_type)
        return [copy.copy(record) for record in entry.records]

    def record_type(self, table: str) -> Optional[type]:
        """The record type `table` was cached as, or None."""
        with self._lock:
            entries = self._entries or {}
        entry = entries.get(table)
        return entry.record_type if entry is not None else None

    def tables(self) -> dict[str, int]:
        """Row count of each cached table."""
        with self._lock:
            entries = self._entries or {}
        return {table: len(entry.records) for table, entry in entries.items()}

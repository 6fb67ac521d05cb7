"""Process-wide cache of rate tables keyed by base currency."""
import threading
from contextlib import contextmanager
from typing import Optional

from splitter.schemas import RateTable


class _ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self):
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class RateCache:
    """
    Thread-safe store of the last fetched RateTable per base currency.

    Entries never expire here: freshness is judged by the caller from
    RateTable.fetched_at, and stale tables stay servable as a fallback.
    """

    def __init__(self):
        self._lock = _ReadWriteLock()
        self._tables: dict[str, RateTable] = {}

    def get(self, base: str) -> Optional[RateTable]:
        with self._lock.read():
            return self._tables.get(base.strip().lower())

    def set(self, base: str, table: RateTable) -> None:
        with self._lock.write():
            self._tables[base.strip().lower()] = table

    def clear(self) -> None:
        with self._lock.write():
            self._tables.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._tables)

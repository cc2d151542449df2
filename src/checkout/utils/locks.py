"""Per-key mutual exclusion with bounded waits.

Used to make the Order compare-and-swap transition and the processed-event
insert atomic within a process: the lock is held across the whole
``current_domain.process()`` call, so the unit of work commits before the
next caller for the same key can read.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from checkout.errors import PersistenceError

logger = structlog.get_logger(__name__)


class KeyedLock:
    def __init__(self, name: str, timeout: float = 5.0) -> None:
        self.name = name
        self.timeout = timeout
        self._mutex = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}
        self._holders: dict[str, int] = {}

    def _checkout(self, key: str) -> threading.RLock:
        with self._mutex:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            self._holders[key] = self._holders.get(key, 0) + 1
            return lock

    def _checkin(self, key: str) -> None:
        with self._mutex:
            remaining = self._holders[key] - 1
            if remaining:
                self._holders[key] = remaining
            else:
                del self._holders[key]
                del self._locks[key]

    @contextmanager
    def hold(self, key: str, timeout: float | None = None) -> Iterator[None]:
        """Hold the lock for ``key``; raise PersistenceError if it cannot be had in time."""
        key = str(key)
        wait = self.timeout if timeout is None else timeout
        lock = self._checkout(key)
        try:
            if not lock.acquire(timeout=wait):
                logger.warning("lock_timeout", lock=self.name, key=key, timeout=wait)
                raise PersistenceError(f"Timed out after {wait}s waiting for {self.name} lock on {key}")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(key)

    def __len__(self) -> int:
        with self._mutex:
            return len(self._locks)

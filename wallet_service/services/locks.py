"""Per-account locks for serializing ledger operations inside one process."""

import threading
import weakref
from contextlib import contextmanager
from typing import Hashable, Iterator

from wallet_service.ledger.errors import OperationTimeout


class AccountLockManager:
    """
    One re-entrant lock per account identity, kept only while some caller
    holds or waits on it.

    `hold` takes locks in sorted identity order, whatever order the caller
    names the accounts in, so two transfers running in opposite directions
    between the same pair cannot deadlock.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._locks = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    def _lock_for(self, key: Hashable) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        acquired = []
        try:
            for key in sorted(set(keys)):
                lock = self._lock_for(key)
                if not lock.acquire(timeout=self.timeout):
                    raise OperationTimeout(f"Timed out waiting for account {key}")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


account_locks = AccountLockManager()

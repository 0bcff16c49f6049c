"""Timestamp source for ledger entries."""

import threading
from datetime import datetime, timezone

class MonotonicClock:
    """
    UTC wall clock that never goes backwards within the process.
    If the system clock steps back, the last issued time is repeated.
    """

    def __init__(self, source=None):
        self._source = source or (lambda: datetime.now(timezone.utc))
        self._last = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = self._source()
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
            return current

"""
Process Clock

Timestamps are read once, at creation, as nanoseconds since the epoch
and converted to calendar time here. The clock never runs backwards
within a process, so created_at values follow creation order.
"""

import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Optional


_NS_PER_SECOND = 1_000_000_000
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ns_to_datetime(ns: int) -> datetime:
    """Convert epoch nanoseconds to a UTC datetime (microsecond precision)."""
    seconds, remainder = divmod(ns, _NS_PER_SECOND)
    return _EPOCH + timedelta(seconds=seconds, microseconds=remainder // 1000)


class MonotonicClock:
    """
    Wall clock in nanoseconds that never goes backwards.

    If the system clock steps back, the last issued value is repeated
    until real time catches up.
    """

    def __init__(self, source=None):
        self._source = source or time.time_ns
        self._last: Optional[int] = None
        self._lock = threading.Lock()

    def now_ns(self) -> int:
        with self._lock:
            current = self._source()
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
            return current

    def now(self) -> datetime:
        return ns_to_datetime(self.now_ns())

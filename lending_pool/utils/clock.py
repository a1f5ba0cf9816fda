"""Timestamp utilities"""

import threading
import time


class MonotonicClock:
    """Wall-clock seconds that never go backwards, even if the system clock does"""

    def __init__(self, source=time.time):
        self._source = source
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            self._last = max(self._last, int(self._source()))
            return self._last
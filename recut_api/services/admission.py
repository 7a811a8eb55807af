import threading

from recut_api.core import config


class TrimSlots:
    """Counts in-flight trims; refuses new ones past MAX_CONCURRENT_TRIMS (0 = no cap)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._active = 0

    @property
    def active(self) -> int:
        with self._lock:
            return self._active

    def try_acquire(self) -> bool:
        limit = config.MAX_CONCURRENT_TRIMS
        with self._lock:
            if limit > 0 and self._active >= limit:
                return False
            self._active += 1
            return True

    def release(self) -> None:
        with self._lock:
            self._active = max(0, self._active - 1)

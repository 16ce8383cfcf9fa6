"""Fixed-window request rate limiting with pluggable storage"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int


class InMemoryRateLimitStore:
    """
    Per-process window counters.

    Suitable for a single instance; multi-instance deployments need a shared
    store implementing the same `hit` / `purge_expired` methods.
    """

    def __init__(self):
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, now: float, window_seconds: float) -> int:
        """Count a request for key and return the count in the current window"""
        with self._lock:
            count, reset_at = self._windows.get(key, (0, 0.0))
            if now >= reset_at:
                count, reset_at = 0, now + window_seconds
            count += 1
            self._windows[key] = (count, reset_at)
            return count

    def purge_expired(self, now: float) -> int:
        with self._lock:
            expired = [key for key, (_, reset_at) in self._windows.items() if now >= reset_at]
            for key in expired:
                del self._windows[key]
            return len(expired)


class RateLimiter:
    """Allow at most `max_requests` per key within each `window_seconds` window"""

    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        store: Optional[InMemoryRateLimitStore] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.store = store or InMemoryRateLimitStore()
        self.clock = clock
        self._last_purge = clock()

    def allow(self, key: str) -> RateLimitResult:
        now = self.clock()
        # Stale windows are dropped every 5 windows
        if now - self._last_purge >= 5 * self.window_seconds:
            self.store.purge_expired(now)
            self._last_purge = now

        count = self.store.hit(key, now, self.window_seconds)
        if count > self.max_requests:
            return RateLimitResult(allowed=False, remaining=0)
        return RateLimitResult(allowed=True, remaining=self.max_requests - count)

    def purge_expired(self) -> int:
        return self.store.purge_expired(self.clock())

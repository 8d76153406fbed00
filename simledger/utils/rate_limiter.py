"""
Client-side throttling for oracle requests.

Bybit counts requests per endpoint group, so the client keeps one sliding
window per group ("public" market data, "private" account reads). A view
may be shared across threads through one client, hence the lock.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable


class RateLimiter:
    """At most max_calls grants in any trailing window of period seconds."""

    def __init__(
        self,
        max_calls: int,
        period: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            max_calls: Grants allowed per window
            period: Window length in seconds
            clock: Monotonic time source (tests pass a fake)
            sleep: Blocking wait used by acquire()
        """
        if max_calls < 1:
            raise ValueError(f"max_calls must be >= 1, got {max_calls}")
        self.max_calls = max_calls
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._granted: deque = deque()

    def _grant_or_wait(self) -> float:
        """Record a grant and return 0, or return seconds until a slot frees."""
        with self._lock:
            now = self._clock()
            while self._granted and self._granted[0] <= now - self.period:
                self._granted.popleft()
            if len(self._granted) < self.max_calls:
                self._granted.append(now)
                return 0.0
            return self._granted[0] + self.period - now

    def acquire(self, timeout: float | None = None) -> bool:
        """
        Block until a slot is granted.

        Returns:
            True once granted, False if timeout seconds passed first
        """
        deadline = None if timeout is None else self._clock() + timeout
        while True:
            wait = self._grant_or_wait()
            if wait <= 0:
                return True
            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    return False
                wait = min(wait, remaining)
            self._sleep(wait)

    @property
    def available_slots(self) -> int:
        with self._lock:
            cutoff = self._clock() - self.period
            return self.max_calls - sum(1 for t in self._granted if t > cutoff)


class MultiRateLimiter:
    """Named limiters, one per endpoint group."""

    def __init__(self):
        self._limiters: dict[str, RateLimiter] = {}

    def add_limiter(self, name: str, max_calls: int, period: float = 1.0) -> RateLimiter:
        limiter = RateLimiter(max_calls, period)
        self._limiters[name] = limiter
        return limiter

    def get_limiter(self, name: str) -> RateLimiter:
        try:
            return self._limiters[name]
        except KeyError:
            raise KeyError(f"No rate limiter named '{name}'") from None


def create_oracle_limiters() -> MultiRateLimiter:
    """
    Limiters for the endpoints the oracle reads.

    Bybit V5 allows 600 public requests per 5s per IP and about 50 private
    requests per second per UID; we stay under both.
    """
    limiters = MultiRateLimiter()
    limiters.add_limiter("public", max_calls=100, period=1.0)
    limiters.add_limiter("private", max_calls=40, period=1.0)
    return limiters

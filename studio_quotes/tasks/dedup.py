"""Time-bounded de-duplication of follow-up side effects."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class InMemoryDedupStore:
    """Remembers keys for `ttl_seconds`; `claim` succeeds once per key per window.

    Process-local. A deployment with several workers should swap in a shared
    store with the same `claim` contract.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._expires: dict[str, float] = {}
        self._lock = threading.Lock()

    def claim(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            self._evict(now)
            if key in self._expires:
                return False
            self._expires[key] = now + self.ttl_seconds
            return True

    def release(self, key: str) -> None:
        with self._lock:
            self._expires.pop(key, None)

    def _evict(self, now: float) -> None:
        expired = [key for key, expires_at in self._expires.items() if expires_at <= now]
        for key in expired:
            del self._expires[key]

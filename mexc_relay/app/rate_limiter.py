"""Fixed-window per-client request limiter.

Each client key gets a counter that resets at a fixed boundary
``window_sec`` after its first request. Bursts straddling a boundary can
reach twice the nominal rate; that is accepted.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Protocol


@dataclass(slots=True)
class RateLimitEntry:
    count: int
    reset_at: float


@dataclass(slots=True)
class RateLimitDecision:
    allowed: bool
    count: int
    reset_at: float


class RateLimitStore(Protocol):
    def update(self, key: str, fn: Callable[[RateLimitEntry | None], RateLimitEntry]) -> RateLimitEntry: ...

    def remove_expired(self, now: float) -> int: ...

    def __len__(self) -> int: ...


class InMemoryRateLimitStore:
    """Dict-backed store; updates are atomic under a lock."""

    def __init__(self) -> None:
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def update(self, key: str, fn: Callable[[RateLimitEntry | None], RateLimitEntry]) -> RateLimitEntry:
        with self._lock:
            entry = fn(self._entries.get(key))
            self._entries[key] = entry
            return RateLimitEntry(entry.count, entry.reset_at)

    def remove_expired(self, now: float) -> int:
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now > entry.reset_at]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class FixedWindowRateLimiter:
    def __init__(
        self,
        store: RateLimitStore | None = None,
        window_sec: float = 60.0,
        max_requests: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if window_sec <= 0:
            raise ValueError("window_sec must be positive")
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.window_sec = window_sec
        self.max_requests = max_requests
        self.clock = clock

    def hit(self, key: str) -> RateLimitDecision:
        now = self.clock()

        def _advance(entry: RateLimitEntry | None) -> RateLimitEntry:
            if entry is None or now > entry.reset_at:
                return RateLimitEntry(count=1, reset_at=now + self.window_sec)
            entry.count += 1
            return entry

        entry = self.store.update(key, _advance)
        return RateLimitDecision(
            allowed=entry.count <= self.max_requests,
            count=entry.count,
            reset_at=entry.reset_at,
        )

    def sweep(self) -> int:
        """Drop entries whose window has elapsed; returns how many went."""
        return self.store.remove_expired(self.clock())

    def retry_after(self, decision: RateLimitDecision) -> int:
        return max(0, int(round(decision.reset_at - self.clock())))

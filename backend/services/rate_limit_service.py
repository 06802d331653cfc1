"""In-memory sliding-window limiter for failed logins. State is lost on restart."""

from __future__ import annotations

import time
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class InMemoryRateLimiter:
    """Count failed attempts per key inside a sliding time window.

    Safe under asyncio's single-threaded model: no check-and-act sequence
    awaits between reading and mutating state. Not safe across OS threads.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._attempts: dict[str, deque[float]] = {}

    def clear(self, key: str) -> None:
        """Forget all attempts for a key."""
        self._attempts.pop(key, None)

    def _pruned(self, key: str, window_seconds: int, now: float) -> deque[float] | None:
        attempts = self._attempts.get(key)
        if attempts is None:
            return None
        cutoff = now - window_seconds
        while attempts and attempts[0] < cutoff:
            attempts.popleft()
        if not attempts:
            del self._attempts[key]
            return None
        return attempts

    def is_limited(self, key: str, limit: int, window_seconds: int) -> tuple[bool, int]:
        """Return ``(limited, retry_after_seconds)`` for the key."""
        now = self._clock()
        attempts = self._pruned(key, window_seconds, now)
        if attempts is None or len(attempts) < limit:
            return False, 0
        retry_after = int(attempts[0] + window_seconds - now) + 1
        return True, max(retry_after, 1)

    def add_failure(self, key: str, window_seconds: int) -> None:
        """Record one failed attempt."""
        now = self._clock()
        attempts = self._pruned(key, window_seconds, now)
        if attempts is None:
            attempts = self._attempts[key] = deque()
        attempts.append(now)

"""In-memory sliding window rate limiter for password checks."""

from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Callable, Deque


class SlidingWindowRateLimiter:
    """Thread-safe sliding window limiter keyed by account name.

    Keys whose attempts have all aged out of the window are dropped, at most
    once per window, so arbitrary names cannot grow the table without bound.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialise limiter parameters and per-key storage."""
        self._max_requests = max_requests
        self._window = window_seconds
        self._clock = clock
        self._events: dict[str, Deque[float]] = {}
        self._last_sweep = clock()
        self._lock = Lock()

    def allow(self, key: str) -> bool:
        """Return ``True`` when another attempt for ``key`` fits in the window."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self._window:
                self._sweep(now)
            attempts = self._events.get(key)
            if attempts is None:
                attempts = self._events[key] = deque()
            self._prune(attempts, now)
            if len(attempts) >= self._max_requests:
                return False
            attempts.append(now)
            return True

    def _prune(self, attempts: Deque[float], now: float) -> None:
        while attempts and now - attempts[0] >= self._window:
            attempts.popleft()

    def _sweep(self, now: float) -> None:
        for key in list(self._events):
            attempts = self._events[key]
            self._prune(attempts, now)
            if not attempts:
                del self._events[key]
        self._last_sweep = now

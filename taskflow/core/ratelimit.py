"""Fixed-window attempt counter used to throttle login requests per client."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from .errors import RateLimitExceeded


@dataclass
class _Window:
    started_at: float
    hits: int = 0


class AttemptLimiter:
    """Allow ``max_attempts`` hits per key inside each ``window_seconds`` window.

    State lives in process memory, so counts are per worker and reset on
    restart.
    """

    def __init__(
        self,
        max_attempts: int,
        window_seconds: float,
        *,
        message: str = "Too many requests",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.message = message
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> int:
        """Record one attempt for ``key`` and return how many remain.

        Raises :class:`RateLimitExceeded` once the window is exhausted.
        """

        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            window = self._windows.get(key)
            if window is None:
                window = _Window(started_at=now)
                self._windows[key] = window
            window.hits += 1
            if window.hits > self.max_attempts:
                retry_after = math.ceil(window.started_at + self.window_seconds - now)
                raise RateLimitExceeded(self.message, retry_after=max(retry_after, 1))
            return self.max_attempts - window.hits

    def _evict_expired(self, now: float) -> None:
        # Windows are inserted in start order, so the oldest come first.
        while self._windows:
            key, window = next(iter(self._windows.items()))
            if now - window.started_at < self.window_seconds:
                break
            del self._windows[key]

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)

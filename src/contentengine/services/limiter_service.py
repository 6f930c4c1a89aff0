"""Sliding-window throughput limiter.

Each instance keeps a log of acquisition timestamps per key. Check-and-record
happens under one lock, so concurrent callers sharing a key never race.
State is process-local and is lost on restart.
"""

import logging
import threading
import time
from collections import deque
from typing import Callable

from contentengine.models.config import LimiterConfig

logger = logging.getLogger(__name__)


class SlidingWindowLimiter:
    """Per-key sliding-window counter with ``(window_ms, max_count)`` settings."""

    def __init__(
        self,
        config: LimiterConfig,
        name: str = "limiter",
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize limiter.

        Args:
            config: Window length and per-window allowance
            name: Label used in log messages
            clock: Seconds-returning monotonic clock (injectable for tests)
        """
        self.config = config
        self.name = name
        self._clock = clock
        self._window_seconds = config.window_ms / 1000.0
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def _prune(self, hits: deque[float], now: float) -> None:
        cutoff = now - self._window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def try_acquire(self, key: str) -> bool:
        """
        Record one attempt for ``key`` if the window has room.

        Rejected attempts are not recorded.

        Args:
            key: Limiter key (user id, IP, or a global constant)

        Returns:
            True if the attempt is allowed, False if the window is exhausted
        """
        with self._lock:
            now = self._clock()
            hits = self._hits.setdefault(key, deque())
            self._prune(hits, now)
            if len(hits) >= self.config.max_count:
                logger.debug(f"🚦 [{self.name}] Rejected key={key} ({len(hits)}/{self.config.max_count})")
                return False
            hits.append(now)
            logger.debug(f"🚦 [{self.name}] Acquired key={key} ({len(hits)}/{self.config.max_count})")
            return True

    def retry_after(self, key: str) -> float:
        """Seconds until ``key`` regains capacity (0.0 if it has room now)."""
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return 0.0
            now = self._clock()
            self._prune(hits, now)
            if len(hits) < self.config.max_count:
                return 0.0
            return max(0.0, round(hits[0] + self._window_seconds - now, 3))

    def remaining(self, key: str) -> int:
        """Attempts left for ``key`` in the current window."""
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return self.config.max_count
            self._prune(hits, self._clock())
            return max(0, self.config.max_count - len(hits))

    def reset(self) -> None:
        """Forget all keys."""
        with self._lock:
            self._hits.clear()

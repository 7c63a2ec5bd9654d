"""In-memory fixed-window rate limiter.

Notes:
- Windows are clock-aligned, not request-aligned: every request inside the
  same calendar window shares one bucket.
- Bursts of up to twice the limit are possible across a window edge.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from ratelimiter.adapters.rate_limit.base import AbstractRateLimiter, Clock, align_to_window

logger = logging.getLogger(__name__)


@dataclass
class _WindowState:
    count: int
    window: int


class FixedWindowRateLimiter(AbstractRateLimiter):
    """Count requests per identifier inside fixed, clock-aligned windows."""

    strategy = "fixedwindow"

    def __init__(
        self,
        *,
        limit: int = 60,
        window_seconds: float = 60.0,
        clock: Clock = time.time,
    ) -> None:
        super().__init__(limit=limit, window_seconds=window_seconds, clock=clock)
        self._state_by_key: dict[str, _WindowState] = {}

    def limit_exceeded(self, identifier: str) -> bool:
        with self._lock:
            window, _ = align_to_window(self._clock(), self._window_seconds)
            state = self._state_by_key.get(identifier)

            if state is None or state.window != window:
                self._state_by_key[identifier] = _WindowState(count=1, window=window)
                return False

            if state.count >= self._limit:
                logger.debug(
                    "rate_limit.window_full",
                    extra={"strategy": self.strategy, "count": state.count},
                )
                return True

            state.count += 1
            return False

    def window_start(self, identifier: str) -> float | None:
        """Return the start (UNIX seconds) of the window tracked for ``identifier``."""

        with self._lock:
            state = self._state_by_key.get(identifier)
            return None if state is None else state.window * self._window_seconds

    def tracked_identifiers(self) -> int:
        with self._lock:
            return len(self._state_by_key)

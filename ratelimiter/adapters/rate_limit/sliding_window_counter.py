"""In-memory sliding-window-counter rate limiter.

Approximates a sliding log with constant space per identifier: the request
count of the previous fixed window is weighted by how much of it still
overlaps the trailing window, then added to the current window's count.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass

from ratelimiter.adapters.rate_limit.base import AbstractRateLimiter, Clock, align_to_window

logger = logging.getLogger(__name__)


@dataclass
class _CounterState:
    count: int
    previous_count: int
    window: int


class SlidingWindowCounterRateLimiter(AbstractRateLimiter):
    """Rate limiter interpolating between the previous and current window.

    The weighted estimate for a request arriving a fraction ``f`` of the way
    into the current window is::

        count + previous_count * (1 - f)

    and the request is rejected when ``floor(estimate) >= limit``.

    Important:
        The clock is assumed to be monotonic enough that ``f`` stays within
        ``[0, 1]``. A fraction outside that range raises
        ``RateLimitInvariantError`` instead of being clamped.
    """

    strategy = "swcounter"

    def __init__(
        self,
        *,
        limit: int = 60,
        window_seconds: float = 30.0,
        clock: Clock = time.time,
    ) -> None:
        super().__init__(limit=limit, window_seconds=window_seconds, clock=clock)
        self._state_by_key: dict[str, _CounterState] = {}

    def _estimate_exceeds_limit(self, estimate: float) -> bool:
        if math.floor(estimate) < self._limit:
            return False
        logger.debug(
            "rate_limit.estimate_exceeded",
            extra={"strategy": self.strategy, "estimate": int(estimate)},
        )
        return True

    def limit_exceeded(self, identifier: str) -> bool:
        with self._lock:
            window, fraction = align_to_window(self._clock(), self._window_seconds)
            state = self._state_by_key.get(identifier)

            if state is not None and state.window == window:
                estimate = state.count + state.previous_count * (1 - fraction)
                if self._estimate_exceeds_limit(estimate):
                    return True
                state.count += 1
                return False

            if state is not None and state.window == window - 1:
                # The stored window just ended, so its count is the previous
                # window's total. A rejection leaves the old record untouched.
                estimate = state.count * (1 - fraction)
                if self._estimate_exceeds_limit(estimate):
                    return True
                state.previous_count = state.count
                state.count = 1
                state.window = window
                return False

            # First sighting, or idle for two windows or more.
            self._state_by_key[identifier] = _CounterState(count=1, previous_count=0, window=window)
            return False

    def tracked_identifiers(self) -> int:
        with self._lock:
            return len(self._state_by_key)

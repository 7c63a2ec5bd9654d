"""In-memory sliding-window-log rate limiter.

Exact sliding-window accounting: one timestamp is kept per admitted request,
so memory per identifier is bounded by the limit once old entries are trimmed.
"""

from __future__ import annotations

import bisect
import logging
import time

from ratelimiter.adapters.rate_limit.base import AbstractRateLimiter, Clock

logger = logging.getLogger(__name__)


class SlidingWindowLogRateLimiter(AbstractRateLimiter):
    """Admit at most ``limit`` requests within any trailing window."""

    strategy = "slidingwindow"

    def __init__(
        self,
        *,
        limit: int = 20,
        window_seconds: float = 10.0,
        clock: Clock = time.time,
    ) -> None:
        super().__init__(limit=limit, window_seconds=window_seconds, clock=clock)
        self._log_by_key: dict[str, list[float]] = {}

    def limit_exceeded(self, identifier: str) -> bool:
        with self._lock:
            # Clock read under the lock keeps the log sorted.
            now = self._clock()
            threshold = now - self._window_seconds
            log = self._log_by_key.setdefault(identifier, [])

            # Everything before the first entry >= threshold has expired.
            expired = bisect.bisect_left(log, threshold)
            if expired:
                del log[:expired]

            if len(log) >= self._limit:
                logger.debug(
                    "rate_limit.log_full",
                    extra={"strategy": self.strategy, "count": len(log)},
                )
                return True

            log.append(now)
            return False

    def tracked_identifiers(self) -> int:
        with self._lock:
            return len(self._log_by_key)

    def snapshot(self, identifier: str) -> list[float]:
        """Return a copy of the retained timestamps for ``identifier``."""

        with self._lock:
            return list(self._log_by_key.get(identifier, ()))

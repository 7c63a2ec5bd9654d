"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not a concrete strategy) so the
strategy can be selected once at startup from configuration.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable

from ratelimiter.core.errors import RateLimitInvariantError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def align_to_window(now: float, window_seconds: float) -> tuple[int, float]:
    """Locate a timestamp on the clock-aligned window grid.

    Windows are identified by their integer index (the window starts at
    ``index * window_seconds``), which keeps same-window and previous-window
    comparisons exact for fractional window sizes.

    Args:
        now: UNIX time in seconds.
        window_seconds: Window size in seconds.

    Returns:
        Tuple of (window_index, fraction_of_window_elapsed).

    Raises:
        RateLimitInvariantError: If the elapsed fraction is outside [0, 1],
            which happens when the clock returns a non-finite value.
    """
    index, elapsed = divmod(now, window_seconds)
    fraction = elapsed / window_seconds

    if not 0.0 <= fraction <= 1.0:
        logger.error(
            "rate_limit.invariant_violation",
            extra={"reason": "window_fraction_out_of_range", "fraction": fraction},
        )
        raise RateLimitInvariantError(
            code="window_fraction_out_of_range",
            message="Elapsed window fraction is outside [0, 1]",
            details={"context": {"fraction": fraction, "now": now}},
        )
    return int(index), fraction


class AbstractRateLimiter(ABC):
    """Interface shared by all rate limiting strategies.

    Each instance guards its whole per-identifier store with a single lock, so
    decisions for the same limiter are serialized regardless of identifier.

    Per-identifier state is created on first sighting and never evicted.
    Subclasses that need bounded memory should override ``evict`` rather than
    dropping state inside ``limit_exceeded``.
    """

    #: Strategy name used by the factory and in stats/logs.
    strategy: str = ""

    def __init__(self, *, limit: int, window_seconds: float, clock: Clock = time.time) -> None:
        """Validate and store the common configuration.

        Args:
            limit: Maximum requests (or tokens) per window for one identifier.
            window_seconds: Window size, or refill period for token buckets.
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError("limit must be an integer >= 1")
        if not (window_seconds > 0 and math.isfinite(window_seconds)):
            raise ValueError("window_seconds must be a finite number > 0")

        self._limit = limit
        self._window_seconds = float(window_seconds)
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    @abstractmethod
    def limit_exceeded(self, identifier: str) -> bool:
        """Record a request for ``identifier`` and decide whether to reject it.

        Args:
            identifier: Opaque client key (e.g., the client IP address).

        Returns:
            True when the limit is exceeded and the request must be rejected,
            False when the request is admitted.
        """
        raise NotImplementedError

    @abstractmethod
    def tracked_identifiers(self) -> int:
        """Return how many identifiers currently hold state."""
        raise NotImplementedError

    def evict(self, identifier: str) -> bool:
        """Extension point for eviction policies; the default keeps everything."""
        return False

    def close(self) -> None:
        """Release background resources held by the limiter."""

    def stats(self) -> dict[str, Any]:
        """Return lightweight limiter metrics without exposing identifiers."""

        return {
            "strategy": self.strategy,
            "limit": self._limit,
            "window_seconds": self._window_seconds,
            "identifiers": self.tracked_identifiers(),
        }

"""Factory for building the configured rate limiting strategy."""

from __future__ import annotations

import logging
from typing import Callable

from ratelimiter.adapters.rate_limit.base import AbstractRateLimiter
from ratelimiter.adapters.rate_limit.fixed_window import FixedWindowRateLimiter
from ratelimiter.adapters.rate_limit.sliding_window_counter import SlidingWindowCounterRateLimiter
from ratelimiter.adapters.rate_limit.sliding_window_log import SlidingWindowLogRateLimiter
from ratelimiter.adapters.rate_limit.token_bucket import TokenBucketRateLimiter
from ratelimiter.core.config import RateLimitSettings
from ratelimiter.core.errors import ValidationAppError

logger = logging.getLogger(__name__)


# strategy -> (limit, window_seconds) used when not configured explicitly
STRATEGY_DEFAULTS: dict[str, tuple[int, float]] = {
    "fixedwindow": (60, 60.0),
    "slidingwindow": (20, 10.0),
    "swcounter": (60, 30.0),
    "tokenbucket": (10, 1.0),
}


_BUILDERS: dict[str, Callable[[int, float], AbstractRateLimiter]] = {
    "fixedwindow": lambda limit, window: FixedWindowRateLimiter(limit=limit, window_seconds=window),
    "slidingwindow": lambda limit, window: SlidingWindowLogRateLimiter(limit=limit, window_seconds=window),
    "swcounter": lambda limit, window: SlidingWindowCounterRateLimiter(limit=limit, window_seconds=window),
    "tokenbucket": lambda limit, window: TokenBucketRateLimiter(capacity=limit, refill_period_seconds=window),
}

SUPPORTED_STRATEGIES: tuple[str, ...] = tuple(_BUILDERS)


def create_rate_limiter(
    strategy: str,
    *,
    limit: int | None = None,
    window_seconds: float | None = None,
) -> AbstractRateLimiter:
    """Instantiate the rate limiter selected by ``strategy``.

    Args:
        strategy: One of ``SUPPORTED_STRATEGIES``.
        limit: Requests per window (token bucket: capacity). Defaults per strategy.
        window_seconds: Window size (token bucket: refill period). Defaults per strategy.

    Returns:
        AbstractRateLimiter: Ready-to-use limiter. Token buckets already run
            their refill thread.

    Raises:
        ValidationAppError: If the strategy is unknown or parameters are invalid.
    """
    name = strategy.strip().lower()
    builder = _BUILDERS.get(name)
    if builder is None:
        raise ValidationAppError(
            code="rate_limit_unknown_strategy",
            message=(
                f"Unsupported rate limiter algorithm: '{strategy}'. "
                f"Supported algorithms: {', '.join(SUPPORTED_STRATEGIES)}"
            ),
            details={"strategy": strategy},
        )

    default_limit, default_window = STRATEGY_DEFAULTS[name]
    resolved_limit = default_limit if limit is None else limit
    resolved_window = default_window if window_seconds is None else window_seconds

    try:
        limiter = builder(resolved_limit, resolved_window)
    except ValueError as exc:
        raise ValidationAppError(
            code="rate_limit_invalid_config",
            message=str(exc),
            details={"strategy": name},
        ) from exc

    logger.info(
        "rate_limit.limiter_created",
        extra={
            "strategy": name,
            "limit": resolved_limit,
            "window_s": resolved_window,
        },
    )
    return limiter


def create_rate_limiter_from_settings(rate_limit_settings: RateLimitSettings) -> AbstractRateLimiter:
    """Build the limiter described by a ``RateLimitSettings`` block."""

    return create_rate_limiter(
        rate_limit_settings.strategy,
        limit=rate_limit_settings.limit,
        window_seconds=rate_limit_settings.window_seconds,
    )

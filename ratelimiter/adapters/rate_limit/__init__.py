"""Rate limiting strategies.

Four interchangeable in-memory strategies share the ``AbstractRateLimiter``
contract; the HTTP layer picks one at startup through the factory.
"""

from ratelimiter.adapters.rate_limit.base import AbstractRateLimiter
from ratelimiter.adapters.rate_limit.factory import (
    STRATEGY_DEFAULTS,
    SUPPORTED_STRATEGIES,
    create_rate_limiter,
    create_rate_limiter_from_settings,
)
from ratelimiter.adapters.rate_limit.fixed_window import FixedWindowRateLimiter
from ratelimiter.adapters.rate_limit.sliding_window_counter import SlidingWindowCounterRateLimiter
from ratelimiter.adapters.rate_limit.sliding_window_log import SlidingWindowLogRateLimiter
from ratelimiter.adapters.rate_limit.token_bucket import TokenBucketRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "FixedWindowRateLimiter",
    "SlidingWindowCounterRateLimiter",
    "SlidingWindowLogRateLimiter",
    "STRATEGY_DEFAULTS",
    "SUPPORTED_STRATEGIES",
    "TokenBucketRateLimiter",
    "create_rate_limiter",
    "create_rate_limiter_from_settings",
]

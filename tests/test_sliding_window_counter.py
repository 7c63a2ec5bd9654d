"""Unit tests for the sliding-window-counter rate limiter.

Windows are 10s long and aligned to multiples of 10, so 1000.0 starts a
window (f = 0), 1005.0 is halfway through it (f = 0.5) and 1009.999 is at
its very end. ``divmod`` keeps the elapsed time inside [0, 10), so f = 1
itself is unreachable and 1009.999 stands in for it.
"""

import math

import pytest

from ratelimiter.adapters.rate_limit.sliding_window_counter import SlidingWindowCounterRateLimiter
from ratelimiter.core.errors import RateLimitInvariantError


def _limiter(clock, limit: int = 10) -> SlidingWindowCounterRateLimiter:
    return SlidingWindowCounterRateLimiter(limit=limit, window_seconds=10, clock=clock)


def _admitted(limiter: SlidingWindowCounterRateLimiter, key: str, attempts: int = 50) -> int:
    return sum(1 for _ in range(attempts) if not limiter.limit_exceeded(key))


def _with_previous_window(clock, previous_count: int, limit: int = 10) -> SlidingWindowCounterRateLimiter:
    """Return a limiter whose record for "k" holds ``previous_count`` requests in [990, 1000)."""
    limiter = _limiter(clock, limit)
    clock.set(990.0)
    for _ in range(previous_count):
        assert limiter.limit_exceeded("k") is False
    return limiter


def test_first_window_behaves_like_fixed_window(clock) -> None:
    limiter = _limiter(clock, limit=3)

    assert _admitted(limiter, "k") == 3
    state = limiter._state_by_key["k"]
    assert (state.count, state.previous_count, state.window) == (3, 0, 100)


@pytest.mark.parametrize(
    ("now", "expected_admitted"),
    [
        # rollover: 8 * (1 - 0) = 8 -> admit; then count + 8 < 10 admits one more
        (1000.0, 2),
        # rollover: 8 * 0.5 = 4; same window: count + 4 < 10 while count <= 5
        (1005.0, 6),
        # previous window contributes floor(8 * 0.0001) = 0
        (1009.999, 10),
    ],
)
def test_admitted_count_depends_on_fraction(clock, now: float, expected_admitted: int) -> None:
    limiter = _with_previous_window(clock, previous_count=8)

    clock.set(now)
    assert _admitted(limiter, "k") == expected_admitted

    state = limiter._state_by_key["k"]
    assert state.previous_count == 8
    assert state.count == expected_admitted
    fraction = (now - 1000.0) / 10
    assert math.floor(state.count + state.previous_count * (1 - fraction)) >= 10


def test_same_window_estimate_at_boundary(clock) -> None:
    limiter = _with_previous_window(clock, previous_count=8)
    clock.set(1005.0)
    for _ in range(5):
        assert limiter.limit_exceeded("k") is False

    # count 5 + 8 * 0.5 = 9 -> admitted, becomes 6
    assert limiter.limit_exceeded("k") is False
    # count 6 + 4 = 10 -> rejected, unchanged
    assert limiter.limit_exceeded("k") is True
    assert limiter._state_by_key["k"].count == 6


def test_rollover_rejection_keeps_previous_record(clock) -> None:
    limiter = _with_previous_window(clock, previous_count=10)

    # 10 * (1 - 0) = 10 >= 10 -> rejected, record still describes [990, 1000)
    clock.set(1000.0)
    assert limiter.limit_exceeded("k") is True
    state = limiter._state_by_key["k"]
    assert (state.count, state.previous_count, state.window) == (10, 0, 99)

    # 10 * (1 - 0.5) = 5 -> admitted and rolled over
    clock.set(1005.0)
    assert limiter.limit_exceeded("k") is False
    state = limiter._state_by_key["k"]
    assert (state.count, state.previous_count, state.window) == (1, 10, 100)


def test_rollover_estimate_uses_floor(clock) -> None:
    limiter = _with_previous_window(clock, previous_count=10)

    # 10 * (1 - 0.05) = 9.5, floor 9 < 10 -> admitted
    clock.set(1000.5)
    assert limiter.limit_exceeded("k") is False


def test_idle_for_two_windows_reinitialises(clock) -> None:
    limiter = _with_previous_window(clock, previous_count=10)

    clock.set(1010.0)
    assert limiter.limit_exceeded("k") is False
    state = limiter._state_by_key["k"]
    assert (state.count, state.previous_count, state.window) == (1, 0, 101)
    assert _admitted(limiter, "k") == 9


def test_isolated_by_identifier(clock) -> None:
    limiter = _limiter(clock, limit=1)

    assert limiter.limit_exceeded("a") is False
    assert limiter.limit_exceeded("a") is True
    assert limiter.limit_exceeded("b") is False


def test_fraction_outside_unit_interval_raises() -> None:
    limiter = SlidingWindowCounterRateLimiter(limit=1, window_seconds=10, clock=lambda: math.nan)

    with pytest.raises(RateLimitInvariantError) as exc_info:
        limiter.limit_exceeded("k")

    assert exc_info.value.code == "window_fraction_out_of_range"
    assert limiter.tracked_identifiers() == 0


def test_defaults_match_reference_deployment() -> None:
    limiter = SlidingWindowCounterRateLimiter()

    assert (limiter.limit, limiter.window_seconds) == (60, 30.0)

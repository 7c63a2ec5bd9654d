"""Unit tests for strategy selection and rate limit settings."""

import math
import threading

import pytest
from pydantic import ValidationError

from ratelimiter.adapters.rate_limit import (
    FixedWindowRateLimiter,
    SlidingWindowCounterRateLimiter,
    SlidingWindowLogRateLimiter,
    TokenBucketRateLimiter,
    create_rate_limiter,
    create_rate_limiter_from_settings,
)
from ratelimiter.core.config import RateLimitSettings
from ratelimiter.core.errors import ValidationAppError


@pytest.mark.parametrize(
    ("strategy", "expected_type", "expected_limit", "expected_window"),
    [
        ("fixedwindow", FixedWindowRateLimiter, 60, 60.0),
        ("slidingwindow", SlidingWindowLogRateLimiter, 20, 10.0),
        ("swcounter", SlidingWindowCounterRateLimiter, 60, 30.0),
        ("tokenbucket", TokenBucketRateLimiter, 10, 1.0),
    ],
)
def test_defaults_per_strategy(strategy, expected_type, expected_limit, expected_window) -> None:
    limiter = create_rate_limiter(strategy)
    try:
        assert isinstance(limiter, expected_type)
        assert limiter.strategy == strategy
        assert limiter.limit == expected_limit
        assert limiter.window_seconds == expected_window
    finally:
        limiter.close()


def test_explicit_parameters_override_defaults() -> None:
    limiter = create_rate_limiter("slidingwindow", limit=5, window_seconds=2.5)

    assert (limiter.limit, limiter.window_seconds) == (5, 2.5)


def test_strategy_name_is_normalised() -> None:
    limiter = create_rate_limiter("  FixedWindow ")

    assert isinstance(limiter, FixedWindowRateLimiter)


def test_unknown_strategy_is_rejected() -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        create_rate_limiter("leakybucket")

    assert exc_info.value.code == "rate_limit_unknown_strategy"
    assert "leakybucket" in exc_info.value.message
    assert "tokenbucket" in exc_info.value.message


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0},
        {"window_seconds": 0},
        {"window_seconds": -1.0},
        {"window_seconds": math.inf},
        {"window_seconds": math.nan},
        {"window_seconds": threading.TIMEOUT_MAX * 2},
    ],
)
def test_invalid_parameters_are_configuration_faults(kwargs: dict) -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        create_rate_limiter("tokenbucket", **kwargs)

    assert exc_info.value.code == "rate_limit_invalid_config"
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_create_from_settings() -> None:
    rate_limit_settings = RateLimitSettings(strategy="swcounter", limit=7, window_seconds=3)

    limiter = create_rate_limiter_from_settings(rate_limit_settings)

    assert isinstance(limiter, SlidingWindowCounterRateLimiter)
    assert (limiter.limit, limiter.window_seconds) == (7, 3.0)


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_STRATEGY", "slidingwindow")
    monkeypatch.setenv("RATE_LIMIT_LIMIT", "4")
    monkeypatch.delenv("RATE_LIMIT_WINDOW_SECONDS", raising=False)

    rate_limit_settings = RateLimitSettings()

    assert rate_limit_settings.strategy == "slidingwindow"
    assert rate_limit_settings.limit == 4
    assert rate_limit_settings.window_seconds is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"strategy": "leakybucket"},
        {"limit": 0},
        {"window_seconds": 0},
        {"window_seconds": "inf"},
        {"window_seconds": "nan"},
    ],
)
def test_settings_validation(kwargs: dict) -> None:
    with pytest.raises(ValidationError):
        RateLimitSettings(**kwargs)

"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any test module imports settings so a
developer's local .env files never leak into the test run.
"""

import os

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("RATE_LIMIT_STRATEGY", "fixedwindow")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest


class FakeTime:
    """Deterministic clock injected into limiters."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds

    def set(self, value: float) -> None:
        self.current = value


@pytest.fixture
def clock() -> FakeTime:
    return FakeTime()

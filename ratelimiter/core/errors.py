"""Application-level exception types.

Rejecting a request is a normal outcome reported by ``limit_exceeded``; the
types here cover the genuine failures: bad configuration, malformed client
addresses at the HTTP boundary, and broken limiter invariants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    field: str
    strategy: str
    peer: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class ClientAddressError(ValidationAppError):
    """Raised when a peer address has no separable host and port."""


class RateLimitInvariantError(AppError):
    """Raised when limiter arithmetic breaks an invariant.

    Signals a bug in time or counter handling; callers must not retry or
    treat it as a rejection.
    """

"""Rate limiting dependency for FastAPI routes.

This module wires the configured limiter into the HTTP layer.

Design goals:
- Minimal coupling: routes depend on a dependency function only.
- One strategy per process, selected at startup and stored on
  ``app.state.rate_limiter``.
- Per-client keys: the limiter is keyed by the peer's host, without port.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import HTTPException, Request, status

from ratelimiter.adapters.rate_limit.base import AbstractRateLimiter
from ratelimiter.core.config import settings
from ratelimiter.core.errors import ClientAddressError

logger = logging.getLogger(__name__)


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the process-wide limiter created by the app factory."""

    return request.app.state.rate_limiter


def client_identifier(request: Request) -> str:
    """Extract the rate limit identifier (client host) for a request.

    Args:
        request: FastAPI request.

    Returns:
        str: Host portion of the peer address.

    Raises:
        ClientAddressError: If the connection has no host/port peer address.
    """

    client = request.client
    if client is None or not client.host or client.port is None:
        raise ClientAddressError(
            code="malformed_client_address",
            message="Client address has no separable host and port",
            details={"peer": repr(client)},
        )
    return client.host


def _hash_identifier(identifier: str) -> str:
    """Hash the identifier for logging without exposing client addresses."""
    return hashlib.sha256(identifier.encode()).hexdigest()[:16]


def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing the per-client rate limit.

    Records one request for the client and raises HTTP 429 when the limiter
    reports the limit as exceeded. The response carries no detail beyond the
    status phrase. Runs in FastAPI's threadpool.

    Args:
        request: FastAPI request.

    Raises:
        HTTPException: 429 Too Many Requests when rate limit is exceeded.
        ClientAddressError: If the client address is malformed.
    """

    if not settings.rate_limit.enabled:
        return

    limiter = get_rate_limiter(request)
    identifier = client_identifier(request)

    if not limiter.limit_exceeded(identifier):
        return

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "strategy": limiter.strategy,
            "key_hash": _hash_identifier(identifier),
            "limit": limiter.limit,
            "window_s": limiter.window_seconds,
        },
    )
    raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS)

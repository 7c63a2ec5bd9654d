"""Application factory for the FastAPI app.

Centralizes app construction (limiter, middleware, handlers, routers) so
tests can build isolated apps around their own limiter instances.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from ratelimiter.adapters.rate_limit.base import AbstractRateLimiter
from ratelimiter.adapters.rate_limit.factory import create_rate_limiter_from_settings
from ratelimiter.api.routes import health_router, limits_router
from ratelimiter.core.config import settings
from ratelimiter.core.exception_handlers import setup_exception_handlers
from ratelimiter.core.logging import configure_logging
from ratelimiter.core.middleware import request_id_middleware

logger = logging.getLogger(__name__)


def create_app(limiter: AbstractRateLimiter | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        limiter: Rate limiter to use. Defaults to the strategy configured
            through ``RATE_LIMIT_*`` settings.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.

    Raises:
        ValidationAppError: If the configured strategy or limits are invalid.
    """
    # Logging first so limiter construction logs are formatted as desired
    configure_logging(settings.log)

    rate_limiter = limiter or create_rate_limiter_from_settings(settings.rate_limit)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("app.startup", extra={"strategy": rate_limiter.strategy})
        yield
        rate_limiter.close()
        logger.info("app.shutdown", extra={"strategy": rate_limiter.strategy})

    app = FastAPI(
        title="Rate Limiter",
        description=(
            "Per-client request admission control. `/limited` is guarded by "
            "one of four strategies (fixed window, sliding window log, sliding "
            "window counter, token bucket); `/unlimited` is not."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.rate_limiter = rate_limiter

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(limits_router)
    app.include_router(health_router)

    return app

"""Global exception handlers for consistent error responses.

Design:
- ValidationAppError (bad config, malformed client address) -> 400
- RateLimitInvariantError (broken limiter arithmetic) -> 500
- Unexpected Exception -> generic 500 (safety net)
- All responses include request_id for tracing

Rate limit rejections are not errors and never reach these handlers; the
rate limit dependency answers them with a bare 429.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ratelimiter.core.errors import AppError, RateLimitInvariantError
from ratelimiter.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _status_code_for(exc: AppError) -> int:
    if isinstance(exc, RateLimitInvariantError):
        return 500
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with a consistent JSON format.

    Invariant violations are logged at ERROR and their details are withheld
    from the client; validation errors are logged at WARNING and returned
    with their details.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = _status_code_for(exc)
    log_extra = {
        "error_code": exc.code,
        "error_message": exc.message,
        "status_code": status_code,
        "request_path": request.url.path,
    }

    error_content: dict = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }

    if status_code >= 500:
        logger.error("app_error_handled", extra=log_extra)
    else:
        logger.warning("app_error_handled", extra=log_extra)
        if exc.details:
            error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure while returning a generic message, so no stack traces
    or internal messages reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)

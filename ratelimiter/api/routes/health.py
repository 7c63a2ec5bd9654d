from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Health check endpoint.

    Returns the service status together with value-free statistics of the
    active rate limiter (strategy, limit, window, tracked identifiers).

    Returns:
        dict: ``{"status": "ok", "rate_limiter": {...}}``.
    """

    limiter = request.app.state.rate_limiter
    return {"status": "ok", "rate_limiter": limiter.stats()}

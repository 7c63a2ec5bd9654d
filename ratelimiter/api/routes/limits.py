from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ratelimiter.core.rate_limit import enforce_rate_limit

router = APIRouter(tags=["Limits"])


@router.get("/unlimited", response_class=PlainTextResponse)
def unlimited() -> str:
    """Endpoint that is never rate limited."""

    return "Unlimited! Let's Go!\n"


@router.get(
    "/limited",
    response_class=PlainTextResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
def limited() -> str:
    """Rate limited endpoint.

    The configured limiter decides per client host; over-limit clients get
    HTTP 429 from the dependency before this handler runs.
    """

    return "Limited, don't over use me!\n"

"""Health check endpoint. Used for liveness and readiness probes."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Change feed not listening", "model": ReadinessErrorResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 while the change feed connection is listening; 503 otherwise.

    The feed is opened in lifespan and is not reconnected, so a dropped
    connection keeps the instance unready until it is restarted.
    """
    feed = getattr(request.app.state, "change_feed", None)
    if feed is not None and feed.is_listening:
        return ReadinessResponse(feed_subscriptions=feed.subscription_count)
    error = (
        ReadinessErrorResponse(change_feed="not_started", message="Change feed was not started")
        if feed is None
        else ReadinessErrorResponse(change_feed="disconnected", message="Change feed is not listening")
    )
    return JSONResponse(
        status_code=503,
        content=error.model_dump(),
        headers={"Retry-After": "30"},
    )

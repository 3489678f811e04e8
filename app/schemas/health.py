"""Health check API schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready when the change feed is listening."""

    status: Literal["ok"] = "ok"
    change_feed: Literal["listening"] = "listening"
    feed_subscriptions: int = Field(..., ge=0, description="Open change feed subscriptions")


class ReadinessErrorResponse(BaseModel):
    """Response for GET /health/ready when observation is unavailable (503)."""

    status: Literal["not_ready"] = "not_ready"
    change_feed: Literal["not_started", "disconnected"]
    message: str = Field(..., description="Reason the service cannot observe orders")

"""WebSocket API schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class WebSocketStatusResponse(BaseModel):
    """Response for GET /ws/status (connection count)."""

    total_connections: int = Field(..., description="Number of active WebSocket connections")
    feed_subscriptions: int = Field(..., description="Open change feed subscriptions")


class ObserveCommand(BaseModel):
    """Client message that switches or stops observation."""

    action: Literal["observe", "stop"]
    order_id: str | None = Field(default=None, min_length=1, max_length=64)

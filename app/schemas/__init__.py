"""API request/response schemas (Pydantic)."""

from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.websocket import ObserveCommand, WebSocketStatusResponse

__all__ = [
    "HealthResponse",
    "ObserveCommand",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "WebSocketStatusResponse",
]

"""Messaging: in-process event bus and Redis broadcast relay."""

from app.infrastructure.messaging.event_bus import SCHEDULE_REFRESH, EventBus
from app.infrastructure.messaging.redis_pubsub import RefreshRelay, RelayMessage

__all__ = [
    "SCHEDULE_REFRESH",
    "EventBus",
    "RefreshRelay",
    "RelayMessage",
]

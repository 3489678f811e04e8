"""Application interfaces (ports). Implemented by infrastructure."""

from app.application.interfaces.repositories import IOrderContactRepository
from app.application.interfaces.services import (
    ChangeHandler,
    IBroadcaster,
    IChangeFeed,
    INotificationService,
    ISubscriptionHandle,
    IToastSink,
)

__all__ = [
    "ChangeHandler",
    "IBroadcaster",
    "IChangeFeed",
    "INotificationService",
    "IOrderContactRepository",
    "ISubscriptionHandle",
    "IToastSink",
]

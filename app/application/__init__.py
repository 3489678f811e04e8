"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (change feed, lookups, notifications).
"""

from app.application.interfaces import (
    IBroadcaster,
    IChangeFeed,
    INotificationService,
    IOrderContactRepository,
    ISubscriptionHandle,
    IToastSink,
)
from app.application.services import StateDiffer, StatusChangeDispatcher, StatusNotifier
from app.application.use_cases import ChangeFeedListener, OrderObservation, OrderStatusSync

__all__ = [
    "ChangeFeedListener",
    "IBroadcaster",
    "IChangeFeed",
    "INotificationService",
    "IOrderContactRepository",
    "ISubscriptionHandle",
    "IToastSink",
    "OrderObservation",
    "OrderStatusSync",
    "StateDiffer",
    "StatusChangeDispatcher",
    "StatusNotifier",
]

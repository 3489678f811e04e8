"""Service interfaces (ports) for the application layer.

Protocols define contracts for the change feed, notification delivery,
toasts and the local broadcast channel (DIP).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.domain.value_objects import FeedFilter, NotificationRequest, RowChange, Toast


ChangeHandler = Callable[["RowChange"], Awaitable[None]]


# Change feed interfaces
class ISubscriptionHandle(Protocol):
    """Open change feed for one filter. Released exactly once by its owner."""

    feed_filter: FeedFilter

    @property
    def active(self) -> bool:
        """True until release() has been called."""
        ...

    async def release(self) -> None:
        """Stop delivery. Later calls are no-ops."""


class IChangeFeed(Protocol):
    """Data Store change feed: delivers row changes matching a filter, in order."""

    async def subscribe(
        self, feed_filter: FeedFilter, handler: ChangeHandler
    ) -> ISubscriptionHandle:
        """Open a feed. Raises SubscriptionException if the feed cannot be opened."""
        ...


# Notification service interface (send-order-status-email function)
class INotificationService(Protocol):
    """Protocol for sending one status email request."""

    async def send_status_notification(self, request: NotificationRequest) -> bool:
        """Send the request. Returns True when accepted; raises NotificationDeliveryException on failure."""
        ...


class IToastSink(Protocol):
    """User-visible toast channel of one observing consumer."""

    async def show(self, toast: Toast) -> None:
        """Deliver a toast. Transient; no acknowledgment."""


class IBroadcaster(Protocol):
    """Process-wide fire-and-forget publish."""

    def publish(self, topic: str, payload: Any = None) -> None:
        """Publish payload to every listener of topic."""

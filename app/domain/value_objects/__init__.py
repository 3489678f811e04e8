"""Domain value objects and shared value types."""

from app.domain.value_objects.core import (
    FeedFilter,
    NotificationRequest,
    Row,
    RowChange,
    Toast,
)

__all__ = [
    "FeedFilter",
    "NotificationRequest",
    "Row",
    "RowChange",
    "Toast",
]

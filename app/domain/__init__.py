"""Domain layer: value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import (
    ChangeEventType,
    EntityKind,
    ObservationState,
    OrderStatus,
    SurveyStatus,
)
from app.domain.exceptions import (
    FeedAlreadyOpenException,
    NotificationDeliveryException,
    ObservationStateException,
    ResourceNotFoundException,
    StatusSyncException,
    SubscriptionException,
    ValidationException,
)
from app.domain.value_objects import (
    FeedFilter,
    NotificationRequest,
    RowChange,
    Toast,
)

__all__ = [
    # Enums
    "ChangeEventType",
    "EntityKind",
    "ObservationState",
    "OrderStatus",
    "SurveyStatus",
    # Exceptions
    "FeedAlreadyOpenException",
    "NotificationDeliveryException",
    "ObservationStateException",
    "ResourceNotFoundException",
    "StatusSyncException",
    "SubscriptionException",
    "ValidationException",
    # Value objects
    "FeedFilter",
    "NotificationRequest",
    "RowChange",
    "Toast",
]

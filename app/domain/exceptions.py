"""Domain exceptions for the order status sync service.

Defines domain-level exceptions for feed subscription, observation
lifecycle, and notification delivery failures. These exceptions are
independent of infrastructure concerns. Presentation layer maps them to
HTTP responses in exception handlers.
"""

from typing import Any


class StatusSyncException(Exception):
    """Base exception for all status sync errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. order_id, entity).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(StatusSyncException):
    """Raised when input validation fails (e.g. empty order id)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(StatusSyncException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'client', 'engineer').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SubscriptionException(StatusSyncException):
    """Raised when a change feed cannot be opened or has dropped."""

    def __init__(self, message: str, entity: str | None = None) -> None:
        details = {"entity": entity} if entity else {}
        super().__init__(message, "SUBSCRIPTION_ERROR", details)


class FeedAlreadyOpenException(StatusSyncException):
    """Raised when a feed for the same (order, entity) key is already active."""

    def __init__(self, order_id: str, entity: str) -> None:
        """Initialize with the duplicate feed key.

        Args:
            order_id: Order the feed is bound to.
            entity: Entity kind of the feed (e.g. 'orders').
        """
        super().__init__(
            f"Feed already open for {entity} on order {order_id}",
            "FEED_ALREADY_OPEN",
            {"order_id": order_id, "entity": entity},
        )


class ObservationStateException(StatusSyncException):
    """Raised when an observation is used outside its allowed state."""

    def __init__(self, order_id: str, state: str, action: str) -> None:
        super().__init__(
            f"Cannot {action} observation of order {order_id} in state {state}",
            "OBSERVATION_STATE_ERROR",
            {"order_id": order_id, "state": state, "action": action},
        )


class NotificationDeliveryException(StatusSyncException):
    """Raised when the status email function rejects or cannot receive a request."""

    def __init__(
        self,
        order_id: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize with order id, failure reason and optional HTTP status.

        Args:
            order_id: Order the notification was for.
            reason: Response body or transport error text.
            status_code: HTTP status returned by the function, if any.
        """
        details: dict[str, Any] = {"order_id": order_id, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"Status notification failed for order {order_id}",
            "NOTIFICATION_DELIVERY_ERROR",
            details,
        )


class SqlNotConfiguredException(StatusSyncException):
    """Raised when an operation requires Postgres but DATABASE_URL is not usable."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )

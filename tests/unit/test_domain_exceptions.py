"""Tests for domain exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    FeedAlreadyOpenException,
    NotificationDeliveryException,
    ObservationStateException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    StatusSyncException,
    SubscriptionException,
    ValidationException,
)


def test_status_sync_exception_default_error_code() -> None:
    """Base StatusSyncException uses class name as error_code when not provided."""
    exc = StatusSyncException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "StatusSyncException"
    assert exc.details == {}


def test_to_dict() -> None:
    exc = StatusSyncException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    exc = ValidationException("order_id must be a non-empty string", field="order_id")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "order_id"}


def test_validation_exception_without_field() -> None:
    assert ValidationException("bad").details == {}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("client", "C1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert "client" in exc.message and "C1" in exc.message
    assert exc.details == {"resource_type": "client", "resource_id": "C1"}


def test_subscription_exception() -> None:
    exc = SubscriptionException("feed down", entity="orders")
    assert exc.error_code == "SUBSCRIPTION_ERROR"
    assert exc.details == {"entity": "orders"}
    assert SubscriptionException("feed down").details == {}


def test_feed_already_open_exception() -> None:
    exc = FeedAlreadyOpenException("O1", "client_surveys")
    assert exc.error_code == "FEED_ALREADY_OPEN"
    assert exc.details == {"order_id": "O1", "entity": "client_surveys"}


def test_observation_state_exception() -> None:
    exc = ObservationStateException("O1", "released", "start")
    assert exc.error_code == "OBSERVATION_STATE_ERROR"
    assert exc.message == "Cannot start observation of order O1 in state released"


def test_notification_delivery_exception() -> None:
    exc = NotificationDeliveryException("O1", "Internal error", status_code=500)
    assert exc.error_code == "NOTIFICATION_DELIVERY_ERROR"
    assert exc.details == {"order_id": "O1", "reason": "Internal error", "status_code": 500}
    assert "status_code" not in NotificationDeliveryException("O1", "timeout").details


def test_sql_not_configured_exception() -> None:
    exc = SqlNotConfiguredException()
    assert exc.error_code == "SERVICE_UNAVAILABLE"

"""StatusNotifier and StatusChangeDispatcher with mocked collaborators."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.dtos import NO_CHANGE, ClientContact, OrderStatusChanged, SurveyStatusChanged
from app.application.services import (
    StateDiffer,
    StatusChangeDispatcher,
    StatusNotifier,
    humanize_status,
    survey_status_message,
)
from app.core.constants import SCHEDULE_REFRESH
from app.domain.enums import ChangeEventType, EntityKind
from app.domain.exceptions import NotificationDeliveryException
from app.domain.value_objects import NotificationRequest, RowChange, Toast
from app.infrastructure.messaging import EventBus


def _contacts(
    contact: ClientContact | None = None,
    engineer_name: str | None = "Bob",
) -> AsyncMock:
    contacts = AsyncMock()
    contacts.get_client_contact = AsyncMock(return_value=contact)
    contacts.get_engineer_name = AsyncMock(return_value=engineer_name)
    return contacts


@pytest.fixture
def dispatcher_mocks():
    """Dispatcher with mocked notifier, broadcaster and toast sink."""
    notifier = MagicMock()
    broadcaster = MagicMock()
    toast_sink = AsyncMock()
    dispatcher = StatusChangeDispatcher(
        notifier=notifier, broadcaster=broadcaster, toast_sink=toast_sink
    )
    return dispatcher, notifier, broadcaster, toast_sink


def test_humanize_status_replaces_every_underscore() -> None:
    assert humanize_status("awaiting_final_payment") == "awaiting final payment"
    assert humanize_status("completed") == "completed"


def test_survey_status_message_known_and_fallback() -> None:
    assert survey_status_message("submitted") == "Survey submitted for review"
    assert survey_status_message("approved") == "Survey approved - ready for next steps"
    assert survey_status_message("rework_requested") == "Survey requires additional work"
    assert survey_status_message("draft") == "Survey status updated to: draft"


async def test_build_request_resolves_contact_and_engineer(order_row, client_contact) -> None:
    contacts = _contacts(client_contact)
    notifier = StatusNotifier(contacts=contacts, notification_service=AsyncMock())

    request = await notifier.build_request(order_row)

    assert request == NotificationRequest(
        order_id="O1",
        status="completed",
        recipient_email="jane@x.com",
        recipient_name="Jane Doe",
        order_number="ORD-1001",
        scheduled_date="2025-03-04",
        assignee_name="Bob",
    )
    contacts.get_client_contact.assert_awaited_once_with("C1")
    contacts.get_engineer_name.assert_awaited_once_with("E1")


async def test_build_request_without_client_id_skips_lookup(order_row) -> None:
    contacts = _contacts()
    notifier = StatusNotifier(contacts=contacts, notification_service=AsyncMock())
    order_row["client_id"] = None

    assert await notifier.build_request(order_row) is None
    contacts.get_client_contact.assert_not_awaited()


async def test_build_request_missing_contact_returns_none(order_row) -> None:
    notifier = StatusNotifier(contacts=_contacts(None), notification_service=AsyncMock())
    assert await notifier.build_request(order_row) is None


async def test_build_request_contact_without_email_returns_none(order_row) -> None:
    contact = ClientContact(client_id="C1", full_name="Jane Doe", email=None)
    notifier = StatusNotifier(contacts=_contacts(contact), notification_service=AsyncMock())
    assert await notifier.build_request(order_row) is None


async def test_build_request_engineer_lookup_failure_omits_name(order_row, client_contact) -> None:
    contacts = _contacts(client_contact)
    contacts.get_engineer_name = AsyncMock(side_effect=RuntimeError("db down"))
    notifier = StatusNotifier(contacts=contacts, notification_service=AsyncMock())

    request = await notifier.build_request(order_row)

    assert request is not None
    assert request.assignee_name is None
    assert request.recipient_email == "jane@x.com"


async def test_build_request_without_engineer_skips_engineer_lookup(order_row, client_contact) -> None:
    contacts = _contacts(client_contact)
    order_row["engineer_id"] = None
    notifier = StatusNotifier(contacts=contacts, notification_service=AsyncMock())

    request = await notifier.build_request(order_row)

    assert request is not None and request.assignee_name is None
    contacts.get_engineer_name.assert_not_awaited()


async def test_notify_sends_in_background(order_row, client_contact) -> None:
    service = AsyncMock()
    service.send_status_notification = AsyncMock(return_value=True)
    notifier = StatusNotifier(contacts=_contacts(client_contact), notification_service=service)

    task = notifier.notify(order_row)
    assert notifier.pending_count == 1
    await notifier.drain()

    assert task.done()
    service.send_status_notification.assert_awaited_once()
    sent = service.send_status_notification.await_args.args[0]
    assert sent.order_id == "O1"
    assert notifier.pending_count == 0


async def test_notify_delivery_failure_is_not_raised(order_row, client_contact) -> None:
    service = AsyncMock()
    service.send_status_notification = AsyncMock(
        side_effect=NotificationDeliveryException("O1", "boom", status_code=500)
    )
    notifier = StatusNotifier(contacts=_contacts(client_contact), notification_service=service)

    task = notifier.notify(order_row)
    await notifier.drain()

    assert task.exception() is None


async def test_notify_client_lookup_failure_skips_send(order_row) -> None:
    contacts = _contacts()
    contacts.get_client_contact = AsyncMock(side_effect=RuntimeError("db down"))
    service = AsyncMock()
    notifier = StatusNotifier(contacts=contacts, notification_service=service)

    task = notifier.notify(order_row)
    await notifier.drain()

    assert task.exception() is None
    service.send_status_notification.assert_not_awaited()


async def test_dispatch_no_change_does_nothing(dispatcher_mocks) -> None:
    dispatcher, notifier, broadcaster, toast_sink = dispatcher_mocks
    await dispatcher.dispatch(NO_CHANGE)
    notifier.notify.assert_not_called()
    broadcaster.publish.assert_not_called()
    toast_sink.show.assert_not_awaited()


async def test_dispatch_order_change_notifies_broadcasts_and_toasts(dispatcher_mocks, order_row) -> None:
    dispatcher, notifier, broadcaster, toast_sink = dispatcher_mocks
    order_row["status_enhanced"] = "in_progress"

    await dispatcher.dispatch(
        OrderStatusChanged(new_status="in_progress", order=order_row, old_status="scheduled")
    )

    notifier.notify.assert_called_once_with(order_row)
    broadcaster.publish.assert_called_once_with(SCHEDULE_REFRESH)
    toast_sink.show.assert_awaited_once_with(
        Toast(title="Order Status Updated", description="Status changed to: in progress")
    )


async def test_dispatch_order_change_notifier_error_still_broadcasts(dispatcher_mocks, order_row) -> None:
    dispatcher, notifier, broadcaster, toast_sink = dispatcher_mocks
    notifier.notify.side_effect = RuntimeError("no loop")

    await dispatcher.dispatch(OrderStatusChanged(new_status="completed", order=order_row))

    broadcaster.publish.assert_called_once_with(SCHEDULE_REFRESH)
    toast_sink.show.assert_awaited_once()


async def test_dispatch_survey_insert_toasts_and_broadcasts(dispatcher_mocks) -> None:
    dispatcher, notifier, broadcaster, toast_sink = dispatcher_mocks

    await dispatcher.dispatch(
        SurveyStatusChanged(new_status="submitted", event_type=ChangeEventType.INSERT, survey_id="S1")
    )

    toast_sink.show.assert_awaited_once_with(
        Toast(title="Survey Updated", description="Survey submitted for review")
    )
    broadcaster.publish.assert_called_once_with(SCHEDULE_REFRESH)
    notifier.notify.assert_not_called()


async def test_dispatch_survey_delete_toasts_removed_status_and_broadcasts(dispatcher_mocks) -> None:
    dispatcher, notifier, broadcaster, toast_sink = dispatcher_mocks
    change = RowChange(
        entity=EntityKind.SURVEY,
        event_type=ChangeEventType.DELETE,
        old={"id": "S1", "order_id": "O1", "status": "submitted"},
    )

    await dispatcher.dispatch(StateDiffer().diff(change))

    toast_sink.show.assert_awaited_once_with(
        Toast(title="Survey Updated", description="Survey submitted for review")
    )
    broadcaster.publish.assert_called_once_with(SCHEDULE_REFRESH)
    notifier.notify.assert_not_called()


async def test_dispatch_toast_failure_still_broadcasts(dispatcher_mocks) -> None:
    dispatcher, _, broadcaster, toast_sink = dispatcher_mocks
    toast_sink.show.side_effect = RuntimeError("socket closed")

    await dispatcher.dispatch(
        SurveyStatusChanged(new_status="approved", event_type=ChangeEventType.UPDATE)
    )

    broadcaster.publish.assert_called_once_with(SCHEDULE_REFRESH)


async def test_dispatch_broadcast_failure_still_toasts(dispatcher_mocks, order_row) -> None:
    dispatcher, _, broadcaster, toast_sink = dispatcher_mocks
    broadcaster.publish.side_effect = RuntimeError("bus closed")

    await dispatcher.dispatch(OrderStatusChanged(new_status="completed", order=order_row))

    toast_sink.show.assert_awaited_once()


async def test_order_scheduled_to_completed_end_to_end() -> None:
    """O1 scheduled -> completed: one email, one refresh, one toast."""
    contact = ClientContact(client_id="C1", full_name="Jane Doe", email="jane@example.com")
    service = AsyncMock()
    service.send_status_notification = AsyncMock(return_value=True)
    notifier = StatusNotifier(contacts=_contacts(contact, "Bob"), notification_service=service)
    bus = EventBus()
    refreshes: list[object] = []
    bus.subscribe(SCHEDULE_REFRESH, refreshes.append)
    toast_sink = AsyncMock()
    dispatcher = StatusChangeDispatcher(notifier=notifier, broadcaster=bus, toast_sink=toast_sink)
    base = {"id": "O1", "client_id": "C1", "engineer_id": "E1"}
    change = RowChange(
        entity=EntityKind.ORDER,
        event_type=ChangeEventType.UPDATE,
        old={**base, "status_enhanced": "scheduled"},
        new={**base, "status_enhanced": "completed"},
    )

    await dispatcher.dispatch(StateDiffer().diff(change))
    await notifier.drain()

    service.send_status_notification.assert_awaited_once_with(
        NotificationRequest(
            order_id="O1",
            status="completed",
            recipient_email="jane@example.com",
            recipient_name="Jane Doe",
            order_number=None,
            scheduled_date=None,
            assignee_name="Bob",
        )
    )
    assert service.send_status_notification.await_args.args[0].to_payload() == {
        "orderId": "O1",
        "status": "completed",
        "clientEmail": "jane@example.com",
        "clientName": "Jane Doe",
        "orderNumber": None,
        "installDate": None,
        "engineerName": "Bob",
    }
    assert refreshes == [None]
    toast_sink.show.assert_awaited_once_with(
        Toast(title="Order Status Updated", description="Status changed to: completed")
    )


async def test_order_change_with_failing_client_lookup_still_broadcasts(order_row) -> None:
    contacts = _contacts()
    contacts.get_client_contact = AsyncMock(side_effect=RuntimeError("db down"))
    service = AsyncMock()
    notifier = StatusNotifier(contacts=contacts, notification_service=service)
    bus = EventBus()
    refreshes: list[object] = []
    bus.subscribe(SCHEDULE_REFRESH, refreshes.append)
    toast_sink = AsyncMock()
    dispatcher = StatusChangeDispatcher(notifier=notifier, broadcaster=bus, toast_sink=toast_sink)

    await dispatcher.dispatch(OrderStatusChanged(new_status="completed", order=order_row))
    await notifier.drain()

    assert refreshes == [None]
    contacts.get_client_contact.assert_awaited_once_with("C1")
    service.send_status_notification.assert_not_awaited()
    toast_sink.show.assert_awaited_once()

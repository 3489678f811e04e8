"""Side effects for detected status transitions.

StatusNotifier is shared by the whole process: it resolves recipients and
sends the status email as a fire-and-forget task. StatusChangeDispatcher is
created per observing consumer: it starts the notifier, shows the toast and
broadcasts schedule:refresh. Courtesy paths are at-most-once attempted:
failures are logged, never retried, and never block the broadcast.
"""

from __future__ import annotations

import asyncio
import logging

from app.application.dtos.status_sync import (
    NoChange,
    OrderStatusChanged,
    StatusOutcome,
    SurveyStatusChanged,
)
from app.application.interfaces import (
    IBroadcaster,
    INotificationService,
    IOrderContactRepository,
    IToastSink,
)
from app.core.constants import SCHEDULE_REFRESH
from app.domain.enums import SurveyStatus
from app.domain.exceptions import NotificationDeliveryException
from app.domain.value_objects import NotificationRequest, Row, Toast

logger = logging.getLogger(__name__)

ORDER_TOAST_TITLE = "Order Status Updated"
SURVEY_TOAST_TITLE = "Survey Updated"

SURVEY_STATUS_MESSAGES: dict[str, str] = {
    SurveyStatus.SUBMITTED.value: "Survey submitted for review",
    SurveyStatus.APPROVED.value: "Survey approved - ready for next steps",
    SurveyStatus.REWORK_REQUESTED.value: "Survey requires additional work",
}


def humanize_status(status: str) -> str:
    """Replace internal separators with spaces (e.g. in_progress -> in progress)."""
    return status.replace("_", " ")


def survey_status_message(status: str) -> str:
    """Toast text for a survey status."""
    return SURVEY_STATUS_MESSAGES.get(status, f"Survey status updated to: {status}")


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


class StatusNotifier:
    """Builds NotificationRequests and sends them in background tasks.

    Tasks are tracked so shutdown can drain them; releasing an observation
    never cancels them.
    """

    def __init__(
        self,
        contacts: IOrderContactRepository,
        notification_service: INotificationService,
        status_field: str = "status_enhanced",
    ) -> None:
        self._contacts = contacts
        self._notification_service = notification_service
        self._status_field = status_field
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def notify(self, order: Row) -> asyncio.Task[None]:
        """Start the courtesy email for an order row; returns without waiting."""
        order_id = str(order.get("id", ""))
        task = asyncio.create_task(self._notify(order), name=f"status-email:{order_id}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight notification tasks (shutdown, tests)."""
        if not self._pending:
            return
        _, pending = await asyncio.wait(list(self._pending), timeout=timeout)
        if pending:
            logger.warning("%d status notification(s) still in flight after drain", len(pending))

    async def build_request(self, order: Row) -> NotificationRequest | None:
        """Resolve recipient data for the order; None when no client contact exists.

        Client lookup errors propagate. An engineer lookup error falls back to
        no engineer name.
        """
        order_id = str(order.get("id", ""))
        client_id = order.get("client_id")
        if not client_id:
            logger.warning("Order %s has no client_id; skipping status email", order_id)
            return None
        contact = await self._contacts.get_client_contact(str(client_id))
        if contact is None or not contact.email:
            logger.warning(
                "No client contact for order %s (client %s); skipping status email",
                order_id,
                client_id,
            )
            return None

        assignee_name: str | None = None
        engineer_id = order.get("engineer_id")
        if engineer_id:
            try:
                assignee_name = await self._contacts.get_engineer_name(str(engineer_id))
            except Exception:
                # TODO: confirm with product whether a failed engineer lookup should skip the email.
                logger.warning(
                    "Engineer lookup failed for order %s; sending without engineer name",
                    order_id,
                    exc_info=True,
                )

        return NotificationRequest(
            order_id=order_id,
            status=str(order.get(self._status_field, "")),
            recipient_email=contact.email,
            recipient_name=contact.full_name,
            order_number=_optional_str(order.get("order_number")),
            scheduled_date=_optional_str(order.get("scheduled_install_date")),
            assignee_name=assignee_name,
        )

    async def _notify(self, order: Row) -> None:
        order_id = order.get("id")
        try:
            request = await self.build_request(order)
        except Exception:
            logger.exception("Recipient lookup failed for order %s; status email skipped", order_id)
            return
        if request is None:
            return
        try:
            await self._notification_service.send_status_notification(request)
        except NotificationDeliveryException as e:
            logger.warning("Status email not delivered for order %s: %s", order_id, e.details)
        except Exception:
            logger.exception("Error sending status email for order %s", order_id)


class StatusChangeDispatcher:
    """Runs side effects for one consumer's detected transitions."""

    def __init__(
        self,
        notifier: StatusNotifier,
        broadcaster: IBroadcaster,
        toast_sink: IToastSink,
    ) -> None:
        self._notifier = notifier
        self._broadcaster = broadcaster
        self._toast_sink = toast_sink

    async def dispatch(self, outcome: StatusOutcome) -> None:
        """Apply side effects for outcome. NoChange does nothing."""
        if isinstance(outcome, NoChange):
            return
        if isinstance(outcome, OrderStatusChanged):
            await self._on_order_status_changed(outcome)
        elif isinstance(outcome, SurveyStatusChanged):
            await self._on_survey_status_changed(outcome)

    async def _on_order_status_changed(self, outcome: OrderStatusChanged) -> None:
        logger.info(
            "Order %s status changed: %s -> %s",
            outcome.order_id,
            outcome.old_status,
            outcome.new_status,
        )
        try:
            self._notifier.notify(outcome.order)
        except Exception:
            logger.exception("Could not start status email for order %s", outcome.order_id)
        self._broadcast()
        await self._show(
            Toast(
                title=ORDER_TOAST_TITLE,
                description=f"Status changed to: {humanize_status(outcome.new_status)}",
            )
        )

    async def _on_survey_status_changed(self, outcome: SurveyStatusChanged) -> None:
        logger.info(
            "Survey %s %s with status %s",
            outcome.survey_id,
            outcome.event_type.value,
            outcome.new_status,
        )
        await self._show(
            Toast(title=SURVEY_TOAST_TITLE, description=survey_status_message(outcome.new_status))
        )
        self._broadcast()

    def _broadcast(self) -> None:
        try:
            self._broadcaster.publish(SCHEDULE_REFRESH)
        except Exception:
            logger.exception("Failed to broadcast %s", SCHEDULE_REFRESH)

    async def _show(self, toast: Toast) -> None:
        try:
            await self._toast_sink.show(toast)
        except Exception:
            logger.exception("Failed to deliver toast %r", toast.title)

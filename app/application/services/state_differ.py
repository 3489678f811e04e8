"""State differ: decides whether a row change is a status transition of interest.

Pure and synchronous. Compares the watched status field of the old and new
snapshots by value. A change that lacks the snapshot needed for the
comparison is NoChange (under-notify rather than alert on corrupted data).
"""

from typing import Any

from app.application.dtos.status_sync import (
    NO_CHANGE,
    OrderStatusChanged,
    StatusOutcome,
    SurveyStatusChanged,
)
from app.domain.enums import ChangeEventType, EntityKind
from app.domain.value_objects import RowChange


def _status_of(snapshot: dict[str, Any] | None, field: str) -> str | None:
    if snapshot is None:
        return None
    value = snapshot.get(field)
    return None if value is None else str(value)


class StateDiffer:
    """Maps RowChange to NoChange, OrderStatusChanged or SurveyStatusChanged."""

    def __init__(
        self,
        order_status_field: str = "status_enhanced",
        survey_status_field: str = "status",
    ) -> None:
        self.order_status_field = order_status_field
        self.survey_status_field = survey_status_field

    def diff(self, change: RowChange) -> StatusOutcome:
        """Route by entity kind."""
        if change.entity is EntityKind.ORDER:
            return self.diff_order(change)
        if change.entity is EntityKind.SURVEY:
            return self.diff_survey(change)
        return NO_CHANGE

    def diff_order(self, change: RowChange) -> StatusOutcome:
        """Order UPDATE with a different status value is a transition; nothing else is."""
        if change.event_type is not ChangeEventType.UPDATE:
            return NO_CHANGE
        if change.old is None or change.new is None:
            return NO_CHANGE
        old_status = _status_of(change.old, self.order_status_field)
        new_status = _status_of(change.new, self.order_status_field)
        if new_status is None or new_status == old_status:
            return NO_CHANGE
        return OrderStatusChanged(
            new_status=new_status,
            order=change.new,
            old_status=old_status,
        )

    def diff_survey(self, change: RowChange) -> StatusOutcome:
        """INSERT and DELETE always count; UPDATE counts only when status differs."""
        field = self.survey_status_field
        if change.event_type is ChangeEventType.INSERT:
            snapshot = change.new
            status = _status_of(snapshot, field)
        elif change.event_type is ChangeEventType.DELETE:
            snapshot = change.old
            status = _status_of(snapshot, field)
        else:
            if change.old is None or change.new is None:
                return NO_CHANGE
            snapshot = change.new
            status = _status_of(change.new, field)
            if status == _status_of(change.old, field):
                return NO_CHANGE
        if snapshot is None or status is None:
            return NO_CHANGE
        survey_id = snapshot.get("id")
        return SurveyStatusChanged(
            new_status=status,
            event_type=change.event_type,
            survey_id=None if survey_id is None else str(survey_id),
        )

"""StateDiffer: which row changes count as status transitions."""

from app.application.dtos import NO_CHANGE, OrderStatusChanged, SurveyStatusChanged
from app.application.services import StateDiffer
from app.domain.enums import ChangeEventType, EntityKind
from app.domain.value_objects import RowChange


def _order_update(old_status: str | None, new_status: str | None) -> RowChange:
    base = {"id": "O1", "client_id": "C1", "engineer_id": "E1"}
    return RowChange(
        entity=EntityKind.ORDER,
        event_type=ChangeEventType.UPDATE,
        old={**base, "status_enhanced": old_status},
        new={**base, "status_enhanced": new_status},
    )


def _survey(
    event_type: ChangeEventType,
    old_status: str | None = None,
    new_status: str | None = None,
) -> RowChange:
    old = {"id": "S1", "order_id": "O1", "status": old_status} if old_status else None
    new = {"id": "S1", "order_id": "O1", "status": new_status} if new_status else None
    return RowChange(entity=EntityKind.SURVEY, event_type=event_type, old=old, new=new)


def test_order_status_change_is_transition() -> None:
    outcome = StateDiffer().diff(_order_update("in_progress", "completed"))
    assert isinstance(outcome, OrderStatusChanged)
    assert outcome.new_status == "completed"
    assert outcome.old_status == "in_progress"
    assert outcome.order_id == "O1"
    assert outcome.order["client_id"] == "C1"


def test_order_same_status_is_no_change() -> None:
    """An update touching other columns does not count."""
    assert StateDiffer().diff(_order_update("completed", "completed")) is NO_CHANGE


def test_order_status_cleared_is_no_change() -> None:
    assert StateDiffer().diff(_order_update("completed", None)) is NO_CHANGE


def test_order_status_set_from_null_is_transition() -> None:
    outcome = StateDiffer().diff(_order_update(None, "awaiting_payment"))
    assert isinstance(outcome, OrderStatusChanged)
    assert outcome.old_status is None


def test_order_update_missing_old_snapshot_is_no_change() -> None:
    change = RowChange(
        entity=EntityKind.ORDER,
        event_type=ChangeEventType.UPDATE,
        old=None,
        new={"id": "O1", "status_enhanced": "completed"},
    )
    assert StateDiffer().diff(change) is NO_CHANGE


def test_order_insert_and_delete_are_no_change() -> None:
    differ = StateDiffer()
    row = {"id": "O1", "status_enhanced": "completed"}
    insert = RowChange(entity=EntityKind.ORDER, event_type=ChangeEventType.INSERT, new=row)
    delete = RowChange(entity=EntityKind.ORDER, event_type=ChangeEventType.DELETE, old=row)
    assert differ.diff(insert) is NO_CHANGE
    assert differ.diff(delete) is NO_CHANGE


def test_order_status_field_is_configurable() -> None:
    differ = StateDiffer(order_status_field="status")
    change = RowChange(
        entity=EntityKind.ORDER,
        event_type=ChangeEventType.UPDATE,
        old={"id": "O1", "status": "a", "status_enhanced": "x"},
        new={"id": "O1", "status": "b", "status_enhanced": "x"},
    )
    outcome = differ.diff(change)
    assert isinstance(outcome, OrderStatusChanged)
    assert outcome.new_status == "b"


def test_survey_insert_is_transition() -> None:
    outcome = StateDiffer().diff(_survey(ChangeEventType.INSERT, new_status="draft"))
    assert outcome == SurveyStatusChanged(
        new_status="draft", event_type=ChangeEventType.INSERT, survey_id="S1"
    )


def test_survey_delete_uses_old_snapshot() -> None:
    outcome = StateDiffer().diff(_survey(ChangeEventType.DELETE, old_status="approved"))
    assert isinstance(outcome, SurveyStatusChanged)
    assert outcome.new_status == "approved"
    assert outcome.event_type is ChangeEventType.DELETE


def test_survey_update_with_new_status_is_transition() -> None:
    outcome = StateDiffer().diff(
        _survey(ChangeEventType.UPDATE, old_status="submitted", new_status="approved")
    )
    assert isinstance(outcome, SurveyStatusChanged)
    assert outcome.new_status == "approved"


def test_survey_update_same_status_is_no_change() -> None:
    change = _survey(ChangeEventType.UPDATE, old_status="submitted", new_status="submitted")
    assert StateDiffer().diff(change) is NO_CHANGE


def test_survey_update_missing_snapshot_is_no_change() -> None:
    change = _survey(ChangeEventType.UPDATE, new_status="approved")
    assert StateDiffer().diff(change) is NO_CHANGE

"""DTOs for order status sync: differ outcomes and contact lookups (no ORM)."""

from dataclasses import dataclass

from app.domain.enums import ChangeEventType
from app.domain.value_objects import Row


@dataclass(frozen=True)
class NoChange:
    """Change event that is not a status transition of interest."""


@dataclass(frozen=True)
class OrderStatusChanged:
    """Order status_enhanced moved to a new value.

    ``order`` is the new row snapshot; the notifier reads client_id,
    engineer_id, order_number and scheduled_install_date from it.
    """

    new_status: str
    order: Row
    old_status: str | None = None

    @property
    def order_id(self) -> str:
        return str(self.order.get("id", ""))


@dataclass(frozen=True)
class SurveyStatusChanged:
    """Survey inserted, deleted, or updated with a different status."""

    new_status: str
    event_type: ChangeEventType
    survey_id: str | None = None


StatusOutcome = NoChange | OrderStatusChanged | SurveyStatusChanged

NO_CHANGE = NoChange()


@dataclass(frozen=True)
class ClientContact:
    """Customer display data for a status email."""

    client_id: str
    full_name: str
    email: str | None

"""Domain value objects for the order status sync service.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

from dataclasses import dataclass, field
from typing import Any

from app.domain.enums import ChangeEventType, EntityKind

Row = dict[str, Any]


@dataclass(frozen=True)
class RowChange:
    """One row-level change delivered by the Data Store change feed.

    INSERT carries only ``new``, DELETE only ``old``, UPDATE both. A change
    with missing snapshots is still representable; the differ decides what
    to do with it.
    """

    entity: EntityKind
    event_type: ChangeEventType
    old: Row | None = None
    new: Row | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "RowChange":
        """Build from a trigger notification payload.

        Expected keys: table, type, old, new. Raises ValueError when the
        table or type is unknown or a snapshot is not an object.
        """
        try:
            entity = EntityKind(data["table"])
            event_type = ChangeEventType(str(data["type"]).upper())
        except KeyError as e:
            raise ValueError(f"Change payload missing key: {e.args[0]}") from e
        old = data.get("old")
        new = data.get("new")
        for name, snapshot in (("old", old), ("new", new)):
            if snapshot is not None and not isinstance(snapshot, dict):
                raise ValueError(f"Change payload '{name}' must be an object")
        return cls(entity=entity, event_type=event_type, old=old, new=new)

    def value_of(self, column: str) -> Any:
        """Return column from new snapshot, falling back to old (for DELETE)."""
        if self.new is not None and column in self.new:
            return self.new[column]
        if self.old is not None:
            return self.old.get(column)
        return None


@dataclass(frozen=True)
class FeedFilter:
    """Change feed filter: one entity, one equality predicate, event types."""

    entity: EntityKind
    column: str
    value: str
    event_types: frozenset[ChangeEventType] = field(
        default_factory=lambda: frozenset(ChangeEventType)
    )

    def __post_init__(self) -> None:
        if not self.column:
            raise ValueError("Feed filter column must be a non-empty string")
        if not self.value:
            raise ValueError("Feed filter value must be a non-empty string")
        if not self.event_types:
            raise ValueError("Feed filter needs at least one event type")

    def matches(self, change: RowChange) -> bool:
        """Return True if change belongs to this feed."""
        if change.entity != self.entity or change.event_type not in self.event_types:
            return False
        current = change.value_of(self.column)
        return current is not None and str(current) == self.value

    def describe(self) -> str:
        """Short form for logs, e.g. orders:id=eq.O1[UPDATE]."""
        types = ",".join(sorted(t.value for t in self.event_types))
        return f"{self.entity.value}:{self.column}=eq.{self.value}[{types}]"


@dataclass(frozen=True)
class NotificationRequest:
    """Status email request for one detected order transition. Not persisted."""

    order_id: str
    status: str
    recipient_email: str
    recipient_name: str
    order_number: str | None = None
    scheduled_date: str | None = None
    assignee_name: str | None = None

    def __post_init__(self) -> None:
        if not self.recipient_email:
            raise ValueError("Notification recipient email must be non-empty")

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the send-order-status-email request body."""
        return {
            "orderId": self.order_id,
            "status": self.status,
            "clientEmail": self.recipient_email,
            "clientName": self.recipient_name,
            "orderNumber": self.order_number,
            "installDate": self.scheduled_date,
            "engineerName": self.assignee_name,
        }


@dataclass(frozen=True)
class Toast:
    """Transient user-visible message for the observing consumer."""

    title: str
    description: str

    def to_message(self) -> dict[str, str]:
        """Serialize as a WebSocket message."""
        return {"type": "toast", "title": self.title, "description": self.description}

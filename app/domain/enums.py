"""Domain enumerations for the order status sync service.

Enums represent fixed sets of domain values (entity kinds, change event
types, known order and survey statuses).
"""

from enum import Enum


class EntityKind(str, Enum):
    """Observed Data Store tables."""

    ORDER = "orders"
    SURVEY = "client_surveys"


class ChangeEventType(str, Enum):
    """Row-level change event type as emitted by the database trigger."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid event type values as strings."""
        return [event_type.value for event_type in cls]


class OrderStatus(str, Enum):
    """Known values of orders.status_enhanced.

    The differ compares raw strings, so values missing here still flow
    through unchanged.
    """

    QUOTE_ACCEPTED = "quote_accepted"
    AWAITING_PAYMENT = "awaiting_payment"
    PAYMENT_RECEIVED = "payment_received"
    AWAITING_AGREEMENT = "awaiting_agreement"
    AWAITING_SURVEY_SUBMISSION = "awaiting_survey_submission"
    AWAITING_SURVEY_REVIEW = "awaiting_survey_review"
    SURVEY_APPROVED = "survey_approved"
    SURVEY_REWORK_REQUESTED = "survey_rework_requested"
    AWAITING_INSTALL_BOOKING = "awaiting_install_booking"
    DATE_OFFERED = "date_offered"
    DATE_ACCEPTED = "date_accepted"
    DATE_REJECTED = "date_rejected"
    OFFER_EXPIRED = "offer_expired"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    INSTALL_COMPLETED_PENDING_QA = "install_completed_pending_qa"
    COMPLETED = "completed"
    ON_HOLD_PARTS_DOCS = "on_hold_parts_docs"
    AWAITING_PARTS_ORDER = "awaiting_parts_order"
    AWAITING_MANUAL_SCHEDULING = "awaiting_manual_scheduling"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> list[str]:
        """Return all known status values as strings."""
        return [status.value for status in cls]


class SurveyStatus(str, Enum):
    """Known values of client_surveys.status."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    RESUBMITTED = "resubmitted"
    APPROVED = "approved"
    REWORK_REQUESTED = "rework_requested"

    @classmethod
    def values(cls) -> list[str]:
        """Return all known status values as strings."""
        return [status.value for status in cls]


class ObservationState(str, Enum):
    """Lifecycle of one order observation. No transition leaves RELEASED."""

    IDLE = "idle"
    SUBSCRIBED = "subscribed"
    RELEASED = "released"

"""Application DTOs (read models and outcomes; no ORM dependency)."""

from app.application.dtos.status_sync import (
    NO_CHANGE,
    ClientContact,
    NoChange,
    OrderStatusChanged,
    StatusOutcome,
    SurveyStatusChanged,
)

__all__ = [
    "NO_CHANGE",
    "ClientContact",
    "NoChange",
    "OrderStatusChanged",
    "StatusOutcome",
    "SurveyStatusChanged",
]

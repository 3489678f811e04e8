"""Application services: state differ and status side-effect dispatch."""

from app.application.services.state_differ import StateDiffer
from app.application.services.status_dispatcher import (
    StatusChangeDispatcher,
    StatusNotifier,
    humanize_status,
    survey_status_message,
)

__all__ = [
    "StateDiffer",
    "StatusChangeDispatcher",
    "StatusNotifier",
    "humanize_status",
    "survey_status_message",
]

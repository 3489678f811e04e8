"""Application use cases: one entry point per workflow."""

from app.application.use_cases.order_status_sync import (
    ChangeFeedListener,
    OrderObservation,
    OrderStatusSync,
    observing,
)

__all__ = [
    "ChangeFeedListener",
    "OrderObservation",
    "OrderStatusSync",
    "observing",
]

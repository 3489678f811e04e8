"""Persistence models: read-only ORM mappings of hosted tables."""

from app.infrastructure.persistence.models.client import Client
from app.infrastructure.persistence.models.engineer import Engineer
from app.infrastructure.persistence.models.mixins import TimestampMixin, UuidPkMixin
from app.infrastructure.persistence.models.order import Order
from app.infrastructure.persistence.models.survey import ClientSurvey

__all__ = [
    "Client",
    "ClientSurvey",
    "Engineer",
    "Order",
    "TimestampMixin",
    "UuidPkMixin",
]

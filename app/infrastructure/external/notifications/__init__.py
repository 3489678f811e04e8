"""Outbound notifications: status email function client and factory."""

from app.infrastructure.external.notifications.factory import NotificationServiceFactory
from app.infrastructure.external.notifications.status_email_client import (
    LoggingNotificationService,
    StatusEmailClient,
)

__all__ = [
    "LoggingNotificationService",
    "NotificationServiceFactory",
    "StatusEmailClient",
]

"""Notification service factory: HTTP function client or logging stub from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from app.application.interfaces import INotificationService
from app.infrastructure.external.notifications.status_email_client import (
    LoggingNotificationService,
    StatusEmailClient,
)

if TYPE_CHECKING:
    from app.core.config import Settings


class NotificationServiceFactory:
    """Factory for notification service instances based on configuration."""

    @staticmethod
    def create_notification_service(
        http_client: httpx.AsyncClient,
        settings: "Settings | None" = None,
    ) -> INotificationService:
        """Create notification service from settings.

        Args:
            http_client: Shared outbound HTTP client.
            settings: Application settings; if None, uses get_settings().

        Returns:
            StatusEmailClient, or LoggingNotificationService when disabled.

        Raises:
            ValueError: Notifications enabled without FUNCTIONS_BASE_URL.
        """
        from app.core.config import get_settings

        s = settings or get_settings()
        if not s.notifications_enabled:
            return LoggingNotificationService()
        if not s.functions_base_url:
            raise ValueError("FUNCTIONS_BASE_URL required when notifications are enabled")
        return StatusEmailClient(
            http_client=http_client,
            base_url=s.functions_base_url,
            service_key=s.functions_service_key.get_secret_value(),
            function_name=s.status_email_function,
            timeout=s.notification_timeout_seconds,
        )

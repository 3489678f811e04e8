"""Client for the send-order-status-email serverless function.

POSTs one NotificationRequest as JSON with the service key. A 2xx response
means the function accepted it (it may still suppress the email in test
mode; that is logged). Anything else raises NotificationDeliveryException;
callers log it and move on. No retries here.
"""

from __future__ import annotations

import logging

import httpx

from app.domain.exceptions import NotificationDeliveryException
from app.domain.value_objects import NotificationRequest
from app.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)

_MAX_ERROR_BODY = 500


class StatusEmailClient:
    """INotificationService over HTTP (shared httpx.AsyncClient)."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        service_key: str,
        function_name: str = "send-order-status-email",
        timeout: float = 15.0,
    ) -> None:
        self._http = http_client
        self._url = f"{base_url.rstrip('/')}/{function_name}"
        self._service_key = service_key
        self._timeout = timeout

    @property
    def url(self) -> str:
        return self._url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._service_key}",
            "apikey": self._service_key,
            "Content-Type": "application/json",
        }

    @traced("notifications.send_status_email")
    async def send_status_notification(self, request: NotificationRequest) -> bool:
        """Send request to the function. Raises NotificationDeliveryException on failure."""
        add_span_attributes(order_id=request.order_id, status=request.status)
        try:
            response = await self._http.post(
                self._url,
                json=request.to_payload(),
                headers=self._headers(),
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise NotificationDeliveryException(request.order_id, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise NotificationDeliveryException(
                request.order_id,
                response.text[:_MAX_ERROR_BODY],
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            body = {}
        if isinstance(body, dict) and body.get("suppressed"):
            logger.info(
                "Status email for order %s (%s) suppressed by function",
                request.order_id,
                request.status,
            )
        else:
            logger.info("Status email sent for order %s (%s)", request.order_id, request.status)
        return True


class LoggingNotificationService:
    """INotificationService that only logs (NOTIFICATIONS_ENABLED=false)."""

    async def send_status_notification(self, request: NotificationRequest) -> bool:
        logger.info(
            "Notifications disabled; would send %s email for order %s",
            request.status,
            request.order_id,
        )
        return False

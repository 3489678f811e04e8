"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (event bus, WebSocket manager,
notification client, change feed, Redis relay, telemetry, DB engine).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import get_settings
from app.core.constants import SCHEDULE_REFRESH
from app.domain.exceptions import SubscriptionException

logger = logging.getLogger(__name__)

NOTIFICATION_DRAIN_TIMEOUT_SECONDS = 10.0


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: event bus, WebSocket manager, HTTP client, notification
    service, contact repository, notifier and differ, change feed, Redis
    relay (if enabled), SQLAlchemy tracing. Shutdown runs in reverse;
    in-flight status emails are drained before the HTTP client closes.
    """
    settings = get_settings()

    # ---- Startup ----
    from app.api.websocket import ConnectionManager
    from app.application.services import StateDiffer, StatusNotifier
    from app.infrastructure.external.notifications import NotificationServiceFactory
    from app.infrastructure.messaging import EventBus
    from app.infrastructure.persistence.database import get_session_factory
    from app.infrastructure.persistence.repositories import OrderContactRepository
    from app.infrastructure.realtime import PostgresChangeFeed

    event_bus = EventBus()
    app.state.event_bus = event_bus

    ws_manager = ConnectionManager()
    app.state.ws_manager = ws_manager
    unsubscribe_refresh = event_bus.subscribe(SCHEDULE_REFRESH, ws_manager.on_schedule_refresh)

    # Shared HTTP client for the status email function (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.notification_timeout_seconds)
    notification_service = NotificationServiceFactory.create_notification_service(
        app.state.http_client, settings
    )

    contacts = OrderContactRepository(get_session_factory())
    app.state.status_notifier = StatusNotifier(
        contacts=contacts,
        notification_service=notification_service,
        status_field=settings.order_status_field,
    )
    app.state.state_differ = StateDiffer(
        order_status_field=settings.order_status_field,
        survey_status_field=settings.survey_status_field,
    )

    change_feed = PostgresChangeFeed(
        settings.asyncpg_dsn,
        channel=settings.change_feed_channel,
        queue_size=settings.change_feed_queue_size,
    )
    app.state.change_feed = change_feed
    try:
        await change_feed.start()
    except SubscriptionException as e:
        logger.error("Change feed unavailable; observation disabled: %s", e.message)

    if settings.redis_enabled:
        from app.infrastructure.messaging import RefreshRelay

        relay = RefreshRelay(event_bus)
        await relay.connect()
        relay.start()
        app.state.refresh_relay = relay
    else:
        app.state.refresh_relay = None

    from app.infrastructure.persistence import database
    from app.shared.telemetry.telemetry import get_telemetry, set_telemetry

    # Provider and FastAPI instrumentation are set up in create_app.
    telemetry = get_telemetry()
    if telemetry is not None and database.engine is not None:
        telemetry.instrument_sqlalchemy(database.engine)

    yield

    # ---- Shutdown ----
    relay = getattr(app.state, "refresh_relay", None)
    if relay is not None:
        await relay.stop()
        app.state.refresh_relay = None

    await change_feed.stop()

    await app.state.status_notifier.drain(timeout=NOTIFICATION_DRAIN_TIMEOUT_SECONDS)

    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("HTTP client closed")

    unsubscribe_refresh()
    await event_bus.drain()
    event_bus.clear()

    if telemetry is not None:
        telemetry.shutdown()
        set_telemetry(None)

    await database.dispose_engine()

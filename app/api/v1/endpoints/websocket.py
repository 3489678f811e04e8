"""WebSocket endpoints: per-consumer order observation and connection status.

Collaborators come from app.state (set in lifespan): ws_manager, event_bus,
status_notifier, state_differ, change_feed. Each socket gets its own
OrderStatusSync so toasts go only to the consumer that is observing.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from app.api.websocket import ConnectionManager, WebSocketToastSink
from app.application.services import StatusChangeDispatcher
from app.application.use_cases import ChangeFeedListener, OrderStatusSync
from app.core.constants import WS_MESSAGE_ERROR, WS_MESSAGE_OBSERVING, WS_MESSAGE_RELEASED
from app.domain.exceptions import StatusSyncException
from app.schemas.websocket import ObserveCommand, WebSocketStatusResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_sync(websocket: WebSocket, manager: ConnectionManager) -> OrderStatusSync:
    """Create one consumer's session from the shared app.state collaborators."""
    state = websocket.app.state
    dispatcher = StatusChangeDispatcher(
        notifier=state.status_notifier,
        broadcaster=state.event_bus,
        toast_sink=WebSocketToastSink(manager, websocket),
    )
    return OrderStatusSync(
        listener=ChangeFeedListener(state.change_feed),
        dispatcher=dispatcher,
        differ=state.state_differ,
    )


def _error(message: str) -> dict[str, Any]:
    return {"type": WS_MESSAGE_ERROR, "error": "BAD_MESSAGE", "message": message}


async def _observe(
    sync: OrderStatusSync,
    manager: ConnectionManager,
    websocket: WebSocket,
    order_id: str,
) -> None:
    """Switch the session to order_id and report the result to the consumer."""
    try:
        await sync.observe(order_id)
    except StatusSyncException as e:
        logger.warning("Could not observe order %s: %s", order_id, e.message)
        await manager.send_to(websocket, {"type": WS_MESSAGE_ERROR, **e.to_dict()})
        return
    await manager.send_to(websocket, {"type": WS_MESSAGE_OBSERVING, "order_id": order_id})


async def _handle_message(
    raw: str,
    sync: OrderStatusSync,
    manager: ConnectionManager,
    websocket: WebSocket,
) -> None:
    try:
        command = ObserveCommand.model_validate_json(raw)
    except ValidationError:
        await manager.send_to(websocket, _error("Unknown message"))
        return
    if command.action == "stop":
        await sync.stop()
        await manager.send_to(websocket, {"type": WS_MESSAGE_RELEASED})
        return
    if not command.order_id:
        await manager.send_to(websocket, _error("order_id is required to observe"))
        return
    await _observe(sync, manager, websocket, command.order_id)


@router.websocket("/orders/{order_id}")
async def order_status_websocket(websocket: WebSocket, order_id: str):
    """Observe order_id and stream toasts and schedule refreshes to the consumer.

    Client messages:
        {"action": "observe", "order_id": "..."} switches the observed order.
        {"action": "stop"} releases the current observation.
    """
    manager: ConnectionManager = websocket.app.state.ws_manager
    await manager.connect(websocket)
    sync = _build_sync(websocket, manager)
    try:
        await _observe(sync, manager, websocket, order_id)
        while True:
            raw = await websocket.receive_text()
            await _handle_message(raw, sync, manager, websocket)
    except WebSocketDisconnect:
        logger.debug("Consumer disconnected while observing %s", sync.order_id)
    finally:
        await sync.close()
        await manager.disconnect(websocket)


@router.get("/status", response_model=WebSocketStatusResponse)
async def websocket_status(request: Request) -> WebSocketStatusResponse:
    """Return active connection and change feed subscription counts."""
    manager: ConnectionManager = request.app.state.ws_manager
    feed = getattr(request.app.state, "change_feed", None)
    return WebSocketStatusResponse(
        total_connections=await manager.get_connection_count(),
        feed_subscriptions=feed.subscription_count if feed is not None else 0,
    )

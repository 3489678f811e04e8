"""WebSocket connection manager.

Holds active consumer connections and provides broadcast and per-socket
send. Use via app.state.ws_manager (set in lifespan). The manager listens
to schedule:refresh on the event bus and forwards it to every connection.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import WebSocket

from app.core.constants import SCHEDULE_REFRESH
from app.domain.value_objects import Toast


class ConnectionManager:
    """Manages consumer WebSocket connections.

    - Tracks connections (connect accepts the socket).
    - Broadcast goes to all connections; dead ones are pruned.
    - connection_count is lock-protected for concurrent access.
    """

    def __init__(self) -> None:
        """Initialize with an empty connection set."""
        self._connections: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a new connection.

        Args:
            websocket: The WebSocket instance to accept and track.
        """
        await websocket.accept()
        async with self._lock:
            self._connections.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a connection (call on disconnect).

        Args:
            websocket: The WebSocket instance to remove.
        """
        async with self._lock:
            self._connections.discard(websocket)

    async def send_to(self, websocket: WebSocket, message: str | dict[str, Any]) -> bool:
        """Send to one connection. Returns False (and prunes it) if the send fails."""
        dead = await self._send_to_list([websocket], message)
        return not dead

    async def broadcast(self, message: str | dict[str, Any]) -> None:
        """Send a message to all connected consumers.

        Args:
            message: String or JSON-serializable dict to send.
        """
        async with self._lock:
            snapshot = list(self._connections)
        await self._send_to_list(snapshot, message)

    async def on_schedule_refresh(self, payload: Any = None) -> None:
        """Event bus listener: tell every consumer to re-fetch."""
        await self.broadcast({"type": SCHEDULE_REFRESH})

    async def _send_to_list(
        self,
        connections: list[WebSocket],
        message: str | dict[str, Any],
    ) -> list[WebSocket]:
        """Send message to a list of connections; remove dead ones under lock."""
        dead: list[WebSocket] = []
        for ws in connections:
            try:
                if isinstance(message, dict):
                    await ws.send_json(message)
                else:
                    await ws.send_text(message)
            except Exception:
                dead.append(ws)
        if dead:
            async with self._lock:
                for ws in dead:
                    self._connections.discard(ws)
        return dead

    async def get_connection_count(self) -> int:
        """Return the total number of active connections (lock-safe)."""
        async with self._lock:
            return len(self._connections)


class WebSocketToastSink:
    """IToastSink that sends toasts to one consumer's socket."""

    def __init__(self, manager: ConnectionManager, websocket: WebSocket) -> None:
        self._manager = manager
        self._websocket = websocket

    async def show(self, toast: Toast) -> None:
        await self._manager.send_to(self._websocket, toast.to_message())

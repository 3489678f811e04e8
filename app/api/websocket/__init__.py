"""WebSocket connection manager and toast sink.

Used by the order status WebSocket endpoint to broadcast and send toasts.
"""

from app.api.websocket.manager import ConnectionManager, WebSocketToastSink

__all__ = ["ConnectionManager", "WebSocketToastSink"]

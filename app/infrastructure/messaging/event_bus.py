"""In-process event bus for local broadcasts (e.g. schedule:refresh).

One instance per application process, created in lifespan and cleared on
shutdown. Publishing is fire-and-forget: sync listeners run inline, async
listeners are scheduled as tasks. No ordering guarantee across listeners;
a failing listener is logged and does not affect the others.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from app.core.constants import SCHEDULE_REFRESH

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]

__all__ = ["SCHEDULE_REFRESH", "EventBus", "Listener"]


class EventBus:
    """Topic-keyed publish/subscribe registry."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._tasks: set[asyncio.Future[Any]] = set()

    def subscribe(self, topic: str, listener: Listener) -> Callable[[], None]:
        """Register listener for topic. Returns a callable that unsubscribes it."""
        self._listeners.setdefault(topic, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(topic)
            if listeners and listener in listeners:
                listeners.remove(listener)
                if not listeners:
                    del self._listeners[topic]

        return unsubscribe

    def publish(self, topic: str, payload: Any = None) -> None:
        """Deliver payload to every listener of topic without waiting."""
        listeners = list(self._listeners.get(topic, ()))
        logger.debug("Publishing %s to %d listener(s)", topic, len(listeners))
        for listener in listeners:
            try:
                result = listener(payload)
            except Exception:
                logger.exception("Listener for %s failed", topic)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._on_task_done)

    def listener_count(self, topic: str) -> int:
        return len(self._listeners.get(topic, ()))

    async def drain(self) -> None:
        """Wait for scheduled async listeners to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def clear(self) -> None:
        """Drop all listeners (shutdown)."""
        self._listeners.clear()

    def _on_task_done(self, task: asyncio.Future[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Async listener failed", exc_info=exc)

"""Redis Pub/Sub relay for local broadcasts across worker processes.

The EventBus is process-local. When several workers serve consumers, the
relay forwards selected topics (schedule:refresh) to a Redis channel and
republishes messages from other workers onto the local bus. Messages carry
the sending instance id so a worker never re-handles its own broadcast.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass
from functools import partial
from typing import Any

import redis.asyncio as redis

from app.core.config import get_settings
from app.core.constants import RELAY_CHANNEL_PREFIX, SCHEDULE_REFRESH
from app.infrastructure.messaging.event_bus import EventBus
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


@dataclass
class RelayMessage:
    """Relay payload for Redis."""

    topic: str
    origin: str
    timestamp: str

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str | bytes) -> RelayMessage:
        """Deserialize from Redis message data."""
        data = json.loads(raw)
        return cls(topic=data["topic"], origin=data["origin"], timestamp=data["timestamp"])


def relay_channel(topic: str) -> str:
    """Redis channel for a bus topic."""
    return f"{RELAY_CHANNEL_PREFIX}:{topic}"


class RefreshRelay:
    """Bridges EventBus topics to Redis pub/sub and back."""

    def __init__(
        self,
        bus: EventBus,
        topics: Iterable[str] = (SCHEDULE_REFRESH,),
        redis_client: redis.Redis | None = None,
    ) -> None:
        """Initialize. Pass redis_client for DI/testing."""
        self.bus = bus
        self.topics = tuple(topics)
        self.redis = redis_client
        self.instance_id = generate_cuid()
        self._connected = redis_client is not None
        self._unsubscribers: list[Callable[[], None]] = []
        self._task: asyncio.Task[None] | None = None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self._connected:
            return
        settings = get_settings()
        try:
            self.redis = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                db=settings.redis_db,
                password=settings.redis_password.get_secret_value() if settings.redis_password else None,
                decode_responses=True,
                socket_connect_timeout=5,
            )
            await self.redis.ping()
            self._connected = True
            logger.info("Redis relay connected")
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis relay connection failed: %s", e)
            self._connected = False
            self.redis = None

    def is_available(self) -> bool:
        """Return True if Redis is connected."""
        return self._connected and self.redis is not None

    def start(self) -> asyncio.Task[None] | None:
        """Hook bus topics and start the Redis listener. No-op when Redis is unavailable."""
        if not self.is_available():
            logger.warning("Redis not available, broadcast relay not started")
            return None
        for topic in self.topics:
            self._unsubscribers.append(self.bus.subscribe(topic, partial(self.forward, topic)))
        self._task = asyncio.create_task(self.run(), name="refresh-relay")
        return self._task

    async def forward(self, topic: str, payload: Any = None) -> bool:
        """Publish a local broadcast to Redis. Relayed broadcasts are not sent back."""
        if isinstance(payload, dict) and payload.get("relayed"):
            return False
        if not self.is_available() or self.redis is None:
            return False
        message = RelayMessage(topic=topic, origin=self.instance_id, timestamp=utc_now().isoformat())
        try:
            await self.redis.publish(relay_channel(topic), message.to_json())
        except Exception:
            logger.exception("Failed to relay %s", topic)
            return False
        return True

    def handle_message(self, raw: str | bytes) -> bool:
        """Republish a Redis message on the local bus unless it came from this instance."""
        try:
            message = RelayMessage.from_json(raw)
        except (json.JSONDecodeError, KeyError, TypeError):
            logger.exception("Failed to parse relay message")
            return False
        if message.origin == self.instance_id or message.topic not in self.topics:
            return False
        self.bus.publish(message.topic, {"relayed": True, "origin": message.origin})
        return True

    async def run(self) -> None:
        """Listen on relay channels until cancelled."""
        if self.redis is None:
            return
        channels = [relay_channel(topic) for topic in self.topics]
        pubsub = self.redis.pubsub()
        try:
            await pubsub.subscribe(*channels)
            logger.info("Subscribed to %s for broadcast relay", ", ".join(channels))
            async for message in pubsub.listen():
                if message["type"] == "message":
                    self.handle_message(message["data"])
        except asyncio.CancelledError:
            logger.info("Broadcast relay task cancelled")
        except Exception:
            logger.exception("Broadcast relay error")
        finally:
            await pubsub.unsubscribe(*channels)
            await pubsub.aclose()

    async def stop(self) -> None:
        """Unhook bus topics, stop the listener, close Redis."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self.redis is not None:
            await self.redis.aclose()
            self._connected = False
            logger.info("Redis relay disconnected")

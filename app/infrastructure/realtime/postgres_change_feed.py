"""Postgres change feed over LISTEN/NOTIFY.

The row_change_notify trigger (persistence/sql/row_change_notify.sql)
publishes {"table", "type", "old", "new"} on one channel. A single
dedicated asyncpg connection listens on it and fans each change out to
the subscriptions whose FeedFilter matches. Every subscription has its own
queue and worker, so its handler sees changes one at a time in delivery
order while other subscriptions keep going. Reconnection is not attempted:
a dropped connection is logged and readiness turns false.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import asyncpg

from app.application.interfaces import ChangeHandler
from app.domain.exceptions import SubscriptionException
from app.domain.value_objects import FeedFilter, RowChange

logger = logging.getLogger(__name__)

Connect = Callable[[str], Awaitable[Any]]


class PostgresSubscription:
    """Open feed for one filter. release() stops delivery exactly once."""

    def __init__(
        self,
        feed: PostgresChangeFeed,
        feed_filter: FeedFilter,
        handler: ChangeHandler,
        queue_size: int,
    ) -> None:
        self.feed_filter = feed_filter
        self._feed = feed
        self._handler = handler
        self._queue: asyncio.Queue[RowChange] = asyncio.Queue(maxsize=queue_size)
        self._worker: asyncio.Task[None] | None = None
        self._released = False

    @property
    def active(self) -> bool:
        return not self._released

    def start(self) -> None:
        self._worker = asyncio.create_task(
            self._run(), name=f"change-feed:{self.feed_filter.describe()}"
        )

    def offer(self, change: RowChange) -> bool:
        """Queue a change for the handler. Returns False if released or full."""
        if self._released:
            return False
        try:
            self._queue.put_nowait(change)
        except asyncio.QueueFull:
            logger.warning(
                "Change queue full for %s; dropping %s event",
                self.feed_filter.describe(),
                change.event_type.value,
            )
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued change has been handled."""
        await self._queue.join()

    async def release(self) -> None:
        """Stop delivery and the worker. Later calls are no-ops."""
        if self._released:
            return
        self._released = True
        self._feed._detach(self)
        worker, self._worker = self._worker, None
        if worker is not None and worker is not asyncio.current_task():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        logger.debug("Released feed %s", self.feed_filter.describe())

    async def _run(self) -> None:
        while True:
            change = await self._queue.get()
            try:
                await self._handler(change)
            except Exception:
                logger.exception(
                    "Change handler failed for %s", self.feed_filter.describe()
                )
            finally:
                self._queue.task_done()


class PostgresChangeFeed:
    """Data Store change feed backed by one LISTEN connection."""

    def __init__(
        self,
        dsn: str,
        channel: str = "row_changes",
        queue_size: int = 1000,
        connect: Connect | None = None,
    ) -> None:
        self._dsn = dsn
        self._channel = channel
        self._queue_size = queue_size
        self._connect = connect or asyncpg.connect
        self._connection: Any = None
        self._subscriptions: set[PostgresSubscription] = set()

    @property
    def is_listening(self) -> bool:
        return self._connection is not None

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    async def start(self) -> None:
        """Open the LISTEN connection. Raises SubscriptionException on failure."""
        if self._connection is not None:
            return
        try:
            connection = await self._connect(self._dsn)
            await connection.add_listener(self._channel, self._on_notification)
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error("Change feed failed to listen on %s: %s", self._channel, e)
            raise SubscriptionException(
                f"Could not listen on channel {self._channel}: {e}"
            ) from e
        connection.add_termination_listener(self._on_termination)
        self._connection = connection
        logger.info("Change feed listening on %s", self._channel)

    async def stop(self) -> None:
        """Release every subscription and close the connection."""
        for subscription in list(self._subscriptions):
            await subscription.release()
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            await connection.remove_listener(self._channel, self._on_notification)
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError):
            logger.warning("Could not remove listener on %s", self._channel, exc_info=True)
        await connection.close()
        logger.info("Change feed stopped")

    async def subscribe(
        self, feed_filter: FeedFilter, handler: ChangeHandler
    ) -> PostgresSubscription:
        """Open a feed for feed_filter. Requires a listening connection."""
        if self._connection is None:
            raise SubscriptionException(
                f"Change feed is not listening; cannot open {feed_filter.describe()}",
                entity=feed_filter.entity.value,
            )
        subscription = PostgresSubscription(self, feed_filter, handler, self._queue_size)
        self._subscriptions.add(subscription)
        subscription.start()
        logger.debug("Subscribed %s", feed_filter.describe())
        return subscription

    def dispatch_payload(self, payload: str) -> int:
        """Parse one notification payload and queue it on matching subscriptions.

        Returns the number of subscriptions the change was queued on.
        Malformed payloads are logged and dropped.
        """
        try:
            change = RowChange.from_payload(json.loads(payload))
        except (json.JSONDecodeError, ValueError, TypeError, AttributeError):
            logger.warning("Dropping malformed change payload on %s", self._channel, exc_info=True)
            return 0
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.feed_filter.matches(change) and subscription.offer(change):
                delivered += 1
        return delivered

    def _detach(self, subscription: PostgresSubscription) -> None:
        self._subscriptions.discard(subscription)

    def _on_notification(
        self, connection: Any, pid: int, channel: str, payload: str
    ) -> None:
        self.dispatch_payload(payload)

    def _on_termination(self, connection: Any) -> None:
        if connection is self._connection:
            self._connection = None
        logger.warning("Change feed connection on %s terminated", self._channel)

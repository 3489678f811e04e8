"""Order status sync use case: feed listening and observation lifecycle.

ChangeFeedListener opens the two per-order feeds. OrderObservation owns
one pair of feeds for one order (IDLE -> SUBSCRIBED -> RELEASED) and
releases them exactly once. OrderStatusSync is one consumer's session: it
switches observations when the watched order changes and routes every
delivered change through the differ to the dispatcher.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from types import TracebackType

from app.application.dtos.status_sync import OrderStatusChanged
from app.application.interfaces import ChangeHandler, IChangeFeed, ISubscriptionHandle
from app.application.services.state_differ import StateDiffer
from app.application.services.status_dispatcher import StatusChangeDispatcher
from app.domain.enums import ChangeEventType, EntityKind, ObservationState
from app.domain.exceptions import (
    FeedAlreadyOpenException,
    ObservationStateException,
    ValidationException,
)
from app.domain.value_objects import FeedFilter, RowChange

logger = logging.getLogger(__name__)

FeedKey = tuple[str, EntityKind]


def order_feed_filter(order_id: str) -> FeedFilter:
    """UPDATE events on orders where id equals order_id."""
    return FeedFilter(
        entity=EntityKind.ORDER,
        column="id",
        value=order_id,
        event_types=frozenset({ChangeEventType.UPDATE}),
    )


def survey_feed_filter(order_id: str) -> FeedFilter:
    """All events on client_surveys where order_id equals order_id."""
    return FeedFilter(
        entity=EntityKind.SURVEY,
        column="order_id",
        value=order_id,
        event_types=frozenset(ChangeEventType),
    )


class ChangeFeedListener:
    """Opens per-order feeds; one active feed per (order, entity) key."""

    def __init__(self, feed: IChangeFeed) -> None:
        self._feed = feed
        self._active: dict[FeedKey, ISubscriptionHandle] = {}

    def is_open(self, order_id: str, entity: EntityKind) -> bool:
        handle = self._active.get((order_id, entity))
        return handle is not None and handle.active

    async def open_order_feed(
        self, order_id: str, handler: ChangeHandler
    ) -> ISubscriptionHandle:
        """Open the order-row feed for order_id."""
        return await self._open(order_feed_filter(order_id), handler)

    async def open_survey_feed(
        self, order_id: str, handler: ChangeHandler
    ) -> ISubscriptionHandle:
        """Open the survey feed scoped to order_id."""
        return await self._open(survey_feed_filter(order_id), handler)

    async def release(self, handle: ISubscriptionHandle) -> None:
        """Release handle and free its key."""
        key = (handle.feed_filter.value, handle.feed_filter.entity)
        if self._active.get(key) is handle:
            del self._active[key]
        await handle.release()

    async def _open(
        self, feed_filter: FeedFilter, handler: ChangeHandler
    ) -> ISubscriptionHandle:
        key = (feed_filter.value, feed_filter.entity)
        if self.is_open(*key):
            raise FeedAlreadyOpenException(feed_filter.value, feed_filter.entity.value)
        handle = await self._feed.subscribe(feed_filter, handler)
        self._active[key] = handle
        logger.debug("Opened feed %s", feed_filter.describe())
        return handle


class OrderObservation:
    """Both feeds of one order, acquired and released as a pair.

    Can be used as an async context manager. A released observation is
    never restarted; observe again with a new instance.
    """

    def __init__(
        self,
        order_id: str,
        listener: ChangeFeedListener,
        on_change: Callable[[RowChange], Awaitable[None]],
    ) -> None:
        if not order_id:
            raise ValidationException("order_id must be a non-empty string", field="order_id")
        self.order_id = order_id
        self.state = ObservationState.IDLE
        self._listener = listener
        self._on_change = on_change
        self._handles: list[ISubscriptionHandle] = []

    async def start(self) -> None:
        """Open the order and survey feeds. On failure, anything opened is released."""
        if self.state is not ObservationState.IDLE:
            raise ObservationStateException(self.order_id, self.state.value, "start")
        self.state = ObservationState.SUBSCRIBED
        try:
            self._handles.append(
                await self._listener.open_order_feed(self.order_id, self._deliver)
            )
            self._handles.append(
                await self._listener.open_survey_feed(self.order_id, self._deliver)
            )
        except Exception:
            await self.release()
            raise
        logger.info("Observing order %s", self.order_id)

    async def release(self) -> bool:
        """Release both feeds. Returns False if already released."""
        if self.state is ObservationState.RELEASED:
            return False
        self.state = ObservationState.RELEASED
        handles, self._handles = self._handles, []
        for handle in handles:
            try:
                await self._listener.release(handle)
            except Exception:
                logger.exception(
                    "Error releasing feed %s", handle.feed_filter.describe()
                )
        logger.info("Released observation of order %s", self.order_id)
        return True

    async def _deliver(self, change: RowChange) -> None:
        if self.state is not ObservationState.SUBSCRIBED:
            logger.debug("Dropping change for released observation of order %s", self.order_id)
            return
        await self._on_change(change)

    async def __aenter__(self) -> OrderObservation:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.release()


class OrderStatusSync:
    """One consumer's observation session.

    observe() swaps the watched order: the previous observation is released
    before the next one opens, under a lock so rapid switches never leave a
    stale feed behind. close() ends the session.
    """

    def __init__(
        self,
        listener: ChangeFeedListener,
        dispatcher: StatusChangeDispatcher,
        differ: StateDiffer,
    ) -> None:
        self._listener = listener
        self._dispatcher = dispatcher
        self._differ = differ
        self._current: OrderObservation | None = None
        self._lock = asyncio.Lock()
        self.last_status: str | None = None

    @property
    def order_id(self) -> str | None:
        """Order currently observed, or None."""
        if self._current is None or self._current.state is not ObservationState.SUBSCRIBED:
            return None
        return self._current.order_id

    async def observe(self, order_id: str) -> OrderObservation:
        """Start observing order_id, releasing any previous observation first."""
        if not order_id:
            raise ValidationException("order_id must be a non-empty string", field="order_id")
        async with self._lock:
            current = self._current
            if (
                current is not None
                and current.order_id == order_id
                and current.state is ObservationState.SUBSCRIBED
            ):
                return current
            if current is not None:
                self._current = None
                await current.release()
                self.last_status = None
            observation = OrderObservation(order_id, self._listener, self._handle_change)
            await observation.start()
            self._current = observation
            return observation

    async def stop(self) -> None:
        """Release the current observation, if any."""
        async with self._lock:
            current, self._current = self._current, None
            if current is not None:
                await current.release()

    async def close(self) -> None:
        await self.stop()

    async def _handle_change(self, change: RowChange) -> None:
        outcome = self._differ.diff(change)
        if isinstance(outcome, OrderStatusChanged):
            self.last_status = outcome.new_status
        await self._dispatcher.dispatch(outcome)

    async def __aenter__(self) -> OrderStatusSync:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()


@asynccontextmanager
async def observing(
    order_id: str,
    listener: ChangeFeedListener,
    on_change: Callable[[RowChange], Awaitable[None]],
) -> AsyncIterator[OrderObservation]:
    """Observe order_id for the duration of the block; feeds are always released."""
    observation = OrderObservation(order_id, listener, on_change)
    await observation.start()
    try:
        yield observation
    finally:
        await observation.release()

"""PostgresChangeFeed fan-out over a fake asyncpg connection."""

import json
from unittest.mock import AsyncMock

import pytest

from app.application.use_cases.order_status_sync import order_feed_filter, survey_feed_filter
from app.domain.enums import ChangeEventType, EntityKind
from app.domain.exceptions import SubscriptionException
from app.infrastructure.realtime import PostgresChangeFeed

CHANNEL = "row_changes"


class FakeConnection:
    """Stands in for asyncpg.Connection's listener API."""

    def __init__(self) -> None:
        self.listeners: dict[str, object] = {}
        self.termination_listeners: list[object] = []
        self.closed = False

    async def add_listener(self, channel, callback) -> None:
        self.listeners[channel] = callback

    async def remove_listener(self, channel, callback) -> None:
        self.listeners.pop(channel, None)

    def add_termination_listener(self, callback) -> None:
        self.termination_listeners.append(callback)

    async def close(self) -> None:
        self.closed = True

    def notify(self, payload: dict | str) -> None:
        raw = payload if isinstance(payload, str) else json.dumps(payload)
        self.listeners[CHANNEL](self, 4242, CHANNEL, raw)


def _order_payload(order_id: str, old: str, new: str) -> dict:
    return {
        "table": "orders",
        "type": "UPDATE",
        "old": {"id": order_id, "status_enhanced": old},
        "new": {"id": order_id, "status_enhanced": new},
    }


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
async def feed(connection: FakeConnection):
    """Started feed over the fake connection; stopped after the test."""
    change_feed = PostgresChangeFeed(
        "postgresql://test@localhost/test",
        channel=CHANNEL,
        queue_size=10,
        connect=AsyncMock(return_value=connection),
    )
    await change_feed.start()
    yield change_feed
    await change_feed.stop()


async def test_start_listens_on_channel(feed: PostgresChangeFeed, connection: FakeConnection) -> None:
    assert feed.is_listening
    assert CHANNEL in connection.listeners
    assert len(connection.termination_listeners) == 1


async def test_start_failure_raises_subscription_exception() -> None:
    change_feed = PostgresChangeFeed(
        "postgresql://test@localhost/test",
        connect=AsyncMock(side_effect=OSError("connection refused")),
    )
    with pytest.raises(SubscriptionException):
        await change_feed.start()
    assert not change_feed.is_listening


async def test_subscribe_requires_listening_connection() -> None:
    change_feed = PostgresChangeFeed("postgresql://test@localhost/test", connect=AsyncMock())
    with pytest.raises(SubscriptionException) as exc_info:
        await change_feed.subscribe(order_feed_filter("O1"), AsyncMock())
    assert exc_info.value.details == {"entity": "orders"}


async def test_matching_change_is_delivered(feed: PostgresChangeFeed, connection: FakeConnection) -> None:
    handler = AsyncMock()
    subscription = await feed.subscribe(order_feed_filter("O1"), handler)

    connection.notify(_order_payload("O1", "in_progress", "completed"))
    await subscription.join()

    handler.assert_awaited_once()
    change = handler.await_args.args[0]
    assert change.entity is EntityKind.ORDER
    assert change.event_type is ChangeEventType.UPDATE
    assert change.new["status_enhanced"] == "completed"


async def test_other_order_and_event_type_are_filtered(feed: PostgresChangeFeed) -> None:
    await feed.subscribe(order_feed_filter("O1"), AsyncMock())

    assert feed.dispatch_payload(json.dumps(_order_payload("O2", "a", "b"))) == 0
    insert = {"table": "orders", "type": "INSERT", "old": None, "new": {"id": "O1"}}
    assert feed.dispatch_payload(json.dumps(insert)) == 0


async def test_survey_delete_matches_on_old_snapshot(feed: PostgresChangeFeed) -> None:
    handler = AsyncMock()
    subscription = await feed.subscribe(survey_feed_filter("O1"), handler)
    payload = {
        "table": "client_surveys",
        "type": "DELETE",
        "old": {"id": "S1", "order_id": "O1", "status": "draft"},
        "new": None,
    }

    assert feed.dispatch_payload(json.dumps(payload)) == 1
    await subscription.join()
    assert handler.await_args.args[0].event_type is ChangeEventType.DELETE


async def test_malformed_payloads_are_dropped(feed: PostgresChangeFeed) -> None:
    await feed.subscribe(order_feed_filter("O1"), AsyncMock())
    assert feed.dispatch_payload("not json") == 0
    assert feed.dispatch_payload(json.dumps({"table": "orders"})) == 0
    assert feed.dispatch_payload(json.dumps({"table": "invoices", "type": "UPDATE"})) == 0
    assert feed.dispatch_payload(json.dumps([1, 2])) == 0


async def test_changes_are_handled_in_delivery_order(
    feed: PostgresChangeFeed, connection: FakeConnection
) -> None:
    seen: list[str] = []

    async def handler(change) -> None:
        seen.append(change.new["status_enhanced"])

    subscription = await feed.subscribe(order_feed_filter("O1"), handler)
    for old, new in (("a", "b"), ("b", "c"), ("c", "d")):
        connection.notify(_order_payload("O1", old, new))
    await subscription.join()

    assert seen == ["b", "c", "d"]


async def test_handler_failure_does_not_stop_worker(
    feed: PostgresChangeFeed, connection: FakeConnection
) -> None:
    handler = AsyncMock(side_effect=[RuntimeError("boom"), None])
    subscription = await feed.subscribe(order_feed_filter("O1"), handler)

    connection.notify(_order_payload("O1", "a", "b"))
    connection.notify(_order_payload("O1", "b", "c"))
    await subscription.join()

    assert handler.await_count == 2


async def test_full_queue_drops_change(connection: FakeConnection) -> None:
    change_feed = PostgresChangeFeed(
        "postgresql://test@localhost/test",
        queue_size=1,
        connect=AsyncMock(return_value=connection),
    )
    await change_feed.start()
    await change_feed.subscribe(order_feed_filter("O1"), AsyncMock())

    assert change_feed.dispatch_payload(json.dumps(_order_payload("O1", "a", "b"))) == 1
    assert change_feed.dispatch_payload(json.dumps(_order_payload("O1", "b", "c"))) == 0
    await change_feed.stop()


async def test_release_stops_delivery(feed: PostgresChangeFeed) -> None:
    handler = AsyncMock()
    subscription = await feed.subscribe(order_feed_filter("O1"), handler)
    assert feed.subscription_count == 1

    await subscription.release()
    await subscription.release()

    assert not subscription.active
    assert feed.subscription_count == 0
    assert feed.dispatch_payload(json.dumps(_order_payload("O1", "a", "b"))) == 0
    handler.assert_not_awaited()


async def test_termination_marks_feed_not_listening(
    feed: PostgresChangeFeed, connection: FakeConnection
) -> None:
    connection.termination_listeners[0](connection)
    assert not feed.is_listening


async def test_stop_releases_subscriptions_and_closes(connection: FakeConnection) -> None:
    change_feed = PostgresChangeFeed(
        "postgresql://test@localhost/test",
        connect=AsyncMock(return_value=connection),
    )
    await change_feed.start()
    subscription = await change_feed.subscribe(survey_feed_filter("O1"), AsyncMock())

    await change_feed.stop()

    assert not subscription.active
    assert change_feed.subscription_count == 0
    assert not change_feed.is_listening
    assert connection.closed
    assert CHANNEL not in connection.listeners

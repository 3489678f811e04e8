"""Realtime: Postgres LISTEN/NOTIFY change feed."""

from app.infrastructure.realtime.postgres_change_feed import (
    PostgresChangeFeed,
    PostgresSubscription,
)

__all__ = ["PostgresChangeFeed", "PostgresSubscription"]

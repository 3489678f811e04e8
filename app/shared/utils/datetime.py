"""UTC datetime helper. Relay timestamps are timezone-aware UTC."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)

"""Install the row change notify trigger used by the order status change feed.

Usage:
    uv run python -m scripts.install_change_feed
    CHANGE_FEED_CHANNEL=row_changes_staging uv run python -m scripts.install_change_feed

Reads DATABASE_URL from environment (or app.core.config). Applies
app/infrastructure/persistence/sql/row_change_notify.sql with the configured
channel name. Exits 0 on success, 1 otherwise.
"""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

SQL_PATH = (
    Path(__file__).resolve().parent.parent
    / "app"
    / "infrastructure"
    / "persistence"
    / "sql"
    / "row_change_notify.sql"
)
DEFAULT_CHANNEL = "row_changes"


async def _main() -> int:
    database_url = os.environ.get("DATABASE_URL")
    channel = os.environ.get("CHANGE_FEED_CHANNEL")
    if not database_url or not channel:
        try:
            from app.core.config import get_settings

            settings = get_settings()
            database_url = database_url or settings.database_url
            channel = channel or settings.change_feed_channel
        except Exception as e:
            print(f"Could not get DATABASE_URL or settings: {e}", file=sys.stderr)
            return 1

    if not channel.replace("_", "").isalnum():
        print(f"Invalid channel name: {channel!r}", file=sys.stderr)
        return 1

    # asyncpg expects postgresql:// (no +asyncpg)
    conn_url = database_url.replace("postgresql+asyncpg://", "postgresql://", 1)
    sql = SQL_PATH.read_text(encoding="utf-8").replace(
        f"'{DEFAULT_CHANNEL}'", f"'{channel}'"
    )

    import asyncpg

    try:
        conn = await asyncpg.connect(conn_url)
    except Exception as e:
        print(f"Failed to connect: {e}", file=sys.stderr)
        return 1

    try:
        async with conn.transaction():
            await conn.execute(sql)
    except asyncpg.PostgresError as e:
        print(f"Failed to install change feed trigger: {e}", file=sys.stderr)
        return 1
    finally:
        await conn.close()

    print(f"Change feed trigger installed (channel: {channel})")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(_main()))

"""Repository interfaces (ports) for the application layer.

Protocols define the Data Store lookups the application needs (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.status_sync import ClientContact


class IOrderContactRepository(Protocol):
    """Point lookups that resolve status email recipients for an order."""

    async def get_client_contact(self, client_id: str) -> ClientContact | None:
        """Return client name and email by primary key, or None if not found."""

    async def get_engineer_name(self, engineer_id: str) -> str | None:
        """Return engineer display name by primary key, or None if not found."""

"""Order contact repository: point lookups for status email recipients.

Runs outside any request scope (from background notification tasks), so
each lookup opens and closes its own session from the factory.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.dtos.status_sync import ClientContact
from app.infrastructure.persistence.models import Client, Engineer
from app.shared.telemetry.tracing import traced


class OrderContactRepository:
    """IOrderContactRepository over SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @traced("repository.get_client_contact")
    async def get_client_contact(self, client_id: str) -> ClientContact | None:
        """Return client name and email, or None if no row has this id."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Client.id, Client.full_name, Client.email).where(Client.id == client_id)
            )
            row = result.one_or_none()
        if row is None:
            return None
        return ClientContact(client_id=str(row.id), full_name=row.full_name, email=row.email)

    @traced("repository.get_engineer_name")
    async def get_engineer_name(self, engineer_id: str) -> str | None:
        """Return engineer display name, or None if no row has this id."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Engineer.name).where(Engineer.id == engineer_id)
            )
            return result.scalar_one_or_none()

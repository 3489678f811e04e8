"""Client ORM model (status email recipient)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TimestampMixin, UuidPkMixin


class Client(UuidPkMixin, TimestampMixin, Base):
    """Customer. Table: clients."""

    __tablename__ = "clients"

    full_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)

"""Engineer ORM model (order assignee)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TimestampMixin, UuidPkMixin


class Engineer(UuidPkMixin, TimestampMixin, Base):
    """Installer assigned to orders. Table: engineers."""

    __tablename__ = "engineers"

    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)

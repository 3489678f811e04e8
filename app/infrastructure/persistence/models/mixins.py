"""SQLAlchemy mixins for common model patterns (DRY).

Tables are owned by the hosted database; these mixins only describe the
columns every mapped table shares.
"""

from datetime import datetime

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, declared_attr, mapped_column


class UuidPkMixin:
    """Mixin for tables keyed by a uuid primary key (mapped as str)."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(Uuid(as_uuid=False), primary_key=True)


class TimestampMixin:
    """Mixin for created_at and updated_at (timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), nullable=False)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime | None]:
        return mapped_column(DateTime(timezone=True), nullable=True)

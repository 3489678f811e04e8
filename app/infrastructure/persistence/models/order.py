"""Order ORM model. status_enhanced is the field the change feed watches."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TimestampMixin, UuidPkMixin


class Order(UuidPkMixin, TimestampMixin, Base):
    """Installation order. Table: orders. Written elsewhere; observed here."""

    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(String, nullable=False)
    status_enhanced: Mapped[str] = mapped_column(String, nullable=False, index=True)
    client_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("clients.id"), nullable=False
    )
    engineer_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("engineers.id"), nullable=True
    )
    scheduled_install_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

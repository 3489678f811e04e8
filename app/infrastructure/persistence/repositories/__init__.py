"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.order_contact_repo import (
    OrderContactRepository,
)

__all__ = ["OrderContactRepository"]

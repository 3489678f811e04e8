"""Persistence: SQLAlchemy engine, read-only models and contact lookups."""

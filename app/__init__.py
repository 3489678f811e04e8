"""Order status sync service."""

"""Infrastructure adapters: change feed, messaging, notifications, persistence."""

"""Logging configuration for the application."""

import logging
import sys

from app.core.config import get_settings

# Third-party loggers that log every query, notification and request at INFO.
QUIET_LOGGERS = ("asyncpg", "httpx", "httpcore", "redis")


def setup_logging() -> None:
    """Configure one stdout handler for the process.

    Level is DEBUG when settings.debug is True, otherwise INFO. Records carry
    the process id so output from several workers can be told apart.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(process)d - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

"""Logging configuration for the workflow service."""

import logging
import sys

from app.core.config import get_settings

_NOISY_LOGGERS = ("sqlalchemy.engine", "asyncio", "httpx")


def setup_logging() -> None:
    """Configure process-wide logging.

    Level comes from settings.log_level, forced to DEBUG when settings.debug
    is True. Output goes to stdout. SQL echo stays controlled by
    settings.database_echo rather than the root level.
    """
    settings = get_settings()
    level_name = "DEBUG" if settings.debug else settings.log_level.upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name (usually __name__)."""
    return logging.getLogger(name)

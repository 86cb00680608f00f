"""Logging configuration for the application."""

import logging
import sys

from app.core.config import get_settings

# Client libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "stripe", "botocore", "urllib3")


def setup_logging() -> None:
    """Configure application-wide logging to stdout.

    Level comes from settings.log_level, else DEBUG when settings.debug is
    True, otherwise INFO. HTTP client loggers are held at WARNING unless the
    app runs at DEBUG.
    """
    settings = get_settings()
    default = "DEBUG" if settings.debug else "INFO"
    level = logging.getLevelName((settings.log_level or default).upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    if level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name (usually __name__)."""
    return logging.getLogger(name)

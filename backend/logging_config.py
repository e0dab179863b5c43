"""Centralized logging configuration."""

import logging

from config import settings

# Third-party loggers that drown out request-level logs at INFO.
# yfinance logs through peewee for its timezone cache.
_NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "httpx",
    "httpcore",
    "urllib3",
    "yfinance",
    "peewee",
    "uvicorn.access",
)


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for the API process.

    Args:
        level: Optional override for settings.LOG_LEVEL (e.g. from a CLI flag).
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
        datefmt="%H:%M:%S",
        level=getattr(logging, level_name),
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

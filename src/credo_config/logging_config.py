"""Logging setup shared by applications embedding the auth engine."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from credo_config.settings import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite")


def configure_logging(settings: Settings) -> None:
    """Configure console logging.

    Sets up:
    - Console output with timestamps and module names
    - Configurable log level for credo modules (from settings)
    - WARNING level for noisy third-party libraries
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    logging.getLogger("credo_auth").setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

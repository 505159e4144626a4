"""Shared configuration package for the credo auth engine."""

from .logging_config import configure_logging
from .settings import (
    Settings,
    clear_settings_cache,
    get_config_dir,
    get_settings,
)

__all__ = [
    "Settings",
    "clear_settings_cache",
    "configure_logging",
    "get_config_dir",
    "get_settings",
]

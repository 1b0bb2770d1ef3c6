"""Configuration module using Pydantic Settings.

Provides typed preview settings with environment variable support, a
persisted preferences store and logging setup.

Usage:
    from rigpreview.config import load_settings, configure_logging

    settings = load_settings(fast_preview=True)
    configure_logging(settings)
"""

from rigpreview.config.log import LOGGER_NAME, configure_logging
from rigpreview.config.settings import (
    PREFERENCE_KEYS,
    Preferences,
    PreviewSettings,
    get_preferences,
    load_settings,
    save_settings,
)

__all__ = [
    "PreviewSettings",
    "Preferences",
    "PREFERENCE_KEYS",
    "get_preferences",
    "load_settings",
    "save_settings",
    "LOGGER_NAME",
    "configure_logging",
]

"""Logging setup for the rigpreview logger hierarchy.

Modules log through ``logging.getLogger(__name__)``; this only sets the
level of the package logger. Handlers are left to the application.
"""

from __future__ import annotations

import logging

from rigpreview.config.settings import PreviewSettings

LOGGER_NAME = "rigpreview"


def configure_logging(
    settings: PreviewSettings | None = None, handler: logging.Handler | None = None
) -> logging.Logger:
    """Set the package logger level from settings.

    Args:
        settings: DEBUG level when ``debug_mode`` is on, INFO otherwise.
        handler: Optional handler to attach, e.g. for a console tool.

    Returns:
        The package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    debug = settings.debug_mode if settings is not None else False
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    if handler is not None and handler not in logger.handlers:
        logger.addHandler(handler)
    return logger

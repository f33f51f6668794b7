from __future__ import annotations

"""Logger helpers shared by all quiver modules."""

import logging
from typing import Optional

from .config import LoggingSettings, get_settings

ROOT_LOGGER_NAME = "quiver"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def getLogger(name: str) -> logging.Logger:
    """Return a logger below the quiver namespace."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(settings: Optional[LoggingSettings] = None) -> logging.Logger:
    """
    Attach a stream handler to the quiver logger using LoggingSettings.

    Calling this twice replaces the handler installed by the first call
    instead of stacking a second one.
    """
    settings = settings or get_settings().logging
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in list(logger.handlers):
        if getattr(handler, "_quiver_configured", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(settings.format))
    handler._quiver_configured = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(settings.level)
    return logger

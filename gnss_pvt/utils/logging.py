"""Logging helpers for the GNSS PVT library."""

from __future__ import annotations

import logging

LOGGER_NAME = "gnss_pvt"


def get_logger(name: str = LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    """Return a logger with a single stream handler attached.

    Library modules log through ``logging.getLogger(__name__)`` and therefore
    propagate into the ``gnss_pvt`` logger configured here.
    """

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger

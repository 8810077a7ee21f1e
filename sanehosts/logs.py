"""Logging setup: one rich handler on the ``sanehosts`` logger."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from sanehosts.config import LOG_LEVELS

LOGGER_NAME = "sanehosts"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure and return the package logger. Safe to call more than once."""
    level = level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(LOG_LEVELS)}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(level)
    logger.propagate = False
    return logger

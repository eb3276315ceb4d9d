"""
Console logging setup for applications embedding ircwatch.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "ircwatch"


def configure_logging(level: str = "INFO", console: Console | None = None) -> logging.Logger:
    """
    Attaches a Rich console handler to the package logger and sets its level.

    Calling this again only updates the level; no duplicate handlers are added.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)

    return logger

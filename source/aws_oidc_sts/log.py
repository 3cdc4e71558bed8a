# ABOUTME: Logging setup for aws-oidc-sts
# ABOUTME: Routes package log records to stderr through rich

"""Logging configuration."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "aws_oidc_sts"

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def level_for_verbosity(verbosity: int) -> int:
    """Map a -v count to a logging level."""
    return _LEVELS.get(verbosity, logging.DEBUG)


def configure_logging(verbosity: int = 0, console: Console | None = None) -> logging.Logger:
    """Install a single rich handler on the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_for_verbosity(verbosity))

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbosity > 1,
        rich_tracebacks=verbosity > 1,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger

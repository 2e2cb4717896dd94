"""Logging setup for lob.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
configure_logging once to route the ``lob`` logger to stderr through Rich.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "lob"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr handler to the ``lob`` logger.

    Previously attached handlers are replaced, so calling this more than
    once in a process does not duplicate output.

    Args:
        verbose: Log progress messages (INFO) instead of warnings only.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_level=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO if verbose else logging.WARNING)
    logger.propagate = False
    return logger

"""Logging configuration for HLA.

Configures the ``hla`` logger with a Rich handler on stderr. Module code only
calls ``logging.getLogger(__name__)``; nothing below the CLI entry point
installs handlers.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_NAME = "hla"


def configure_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Install a Rich handler on the ``hla`` logger.

    Args:
        verbose: Log at DEBUG instead of WARNING
        console: Console to write to (defaults to stderr)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOG_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def silence_console_logging() -> None:
    """Detach console handlers while a full-screen TUI owns the terminal."""
    logger = logging.getLogger(LOG_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.addHandler(logging.NullHandler())

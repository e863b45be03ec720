"""Logging setup for the pg-backup CLI.

Library modules only call ``logging.getLogger(__name__)``; the CLI calls
``setup_logging()`` once to attach a rich handler to the package logger.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "pg_backup"


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Attach a ``RichHandler`` to the ``pg_backup`` logger.

    Safe to call more than once; the handler is replaced, not duplicated.

    Args:
        verbose: Log at DEBUG instead of INFO.
        console: Console the handler writes to (stderr by default).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger

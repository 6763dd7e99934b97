"""
Rich console logging for the command line.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from .logger import _level

console = Console(stderr=True)


def setup_rich_logging(level: str = "INFO", show_path: bool = False) -> RichHandler:
    """
    Route all log records through a rich handler on stderr.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        show_path: Show the emitting module path next to each record

    Returns:
        The installed handler
    """
    numeric_level = _level(level)

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=show_path,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    handler.setLevel(numeric_level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)
    return handler

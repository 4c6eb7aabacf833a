"""Logging setup for the command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# Libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich.

    Args:
        verbose: Log at DEBUG instead of INFO
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

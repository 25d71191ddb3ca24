"""Shared rich console and logging setup.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves; front ends call :func:`setup_logging`.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Attach a rich handler to the ``mediaart`` logger.

    Calling it again replaces the previous handler, so the level can be
    changed between runs in one process.
    """
    logger = logging.getLogger("mediaart")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    handler = RichHandler(console=console, show_path=verbose, markup=False)
    handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.addHandler(handler)
    logger.propagate = False
    return logger

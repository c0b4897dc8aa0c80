"""Shared Rich console and logging setup for CLI commands."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def configure_logging(level: str = "INFO", *, debug: bool = False) -> None:
    """Route snapforge log records through Rich."""
    handler = RichHandler(console=console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("[percy] %(message)s"))
    package_logger = logging.getLogger("snapforge")
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(logging.DEBUG if debug else level.upper())

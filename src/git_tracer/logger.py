"""Logging utilities with rich output.

Usage:
    from git_tracer.logger import get_logger

    logger = get_logger(__name__)
    logger.debug("Resolved branch %s", ref)
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

# Shared consoles so log records and status lines never interleave mid-line
console = Console()
err_console = Console(stderr=True)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger.

    Handlers live on the root logger (see :func:`setup_logging`), so module
    loggers just propagate. This keeps pytest's caplog working.
    """
    return logging.getLogger(name)


def setup_logging(level: str = "WARNING") -> None:
    """Configure the root logger once, at the CLI entry point.

    Args:
        level: Default logging level; the LOG_LEVEL environment variable wins.
    """
    level = os.getenv("LOG_LEVEL", level).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    rich_handler = RichHandler(
        console=err_console,
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(rich_handler)


def progress(message: str) -> None:
    """Print a progress line without any logger prefix."""
    console.print(message, markup=False, highlight=False)


def success(message: str, out: Console | None = None) -> None:
    (out or console).print(f"[green]✓[/green] {escape(message)}")


def warning(message: str, out: Console | None = None) -> None:
    (out or console).print(f"[yellow]⚠[/yellow] {escape(message)}")


def error(message: str) -> None:
    err_console.print(f"[red]✗[/red] Error: {escape(message)}")

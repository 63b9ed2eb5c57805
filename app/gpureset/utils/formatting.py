"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich. Every message
printed through these helpers is also emitted on the ``gpureset.console``
logger so the run transcript holds the same lines the operator saw.
"""

import logging
import sys

from rich.console import Console
from rich.markup import escape

from gpureset.core.theme import get_theme

transcript = logging.getLogger("gpureset.console")


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def print_step(message: str) -> None:
    """Print a step heading."""
    transcript.info("==> %s", message)
    console.print(f"\n[step]==>[/] [bold]{escape(message)}[/]")


def print_info(message: str) -> None:
    """Print an info message."""
    transcript.info(message)
    console.print(f"[info]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    transcript.warning(message)
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    transcript.error(message)
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    transcript.info(message)
    console.print(f"[success]{escape(message)}[/]")

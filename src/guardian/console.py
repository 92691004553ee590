"""Centralized terminal output for guardian.

All user-facing CLI output should go through this module.

Key principle: stderr for status/progress, stdout for data. Activity log
lines count as data, so ``print_entry`` writes to stdout.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from guardian.keepalive.state import LogEntry

# stderr console for status messages (success/error)
err_console = Console(stderr=True)

# stdout console for data output (activity log lines)
out_console = Console()

# Rich style per log category value
ENTRY_STYLES: dict[str, str] = {
    "start": "bold cyan",
    "step": "dim",
    "step_success": "green",
    "success": "bold green",
    "error": "bold red",
    "info": "blue",
    "schedule": "magenta",
}


def _emit(style: str, symbol: str, message: str, console: Console | None) -> None:
    c = console or err_console
    prefix = f"{symbol} " if symbol else ""
    c.print(f"[{style}]  {prefix}{escape(message)}[/{style}]")


def success(message: str, *, console: Console | None = None) -> None:
    """Print a success message (green checkmark) to stderr."""
    _emit("green", "✓", message, console)


def error(message: str, *, console: Console | None = None) -> None:
    """Print an error message (red X) to stderr."""
    _emit("red", "✗", message, console)


def warn(message: str, *, console: Console | None = None) -> None:
    """Print a warning message (yellow) to stderr."""
    _emit("yellow", "⚠", message, console)


def info(message: str, *, console: Console | None = None) -> None:
    """Print an info message (dim) to stderr."""
    _emit("dim", "", message, console)


def print_entry(entry: LogEntry, *, console: Console | None = None) -> None:
    """Print one activity log entry to stdout, styled by its category."""
    c = console or out_console
    style = ENTRY_STYLES.get(entry.category.value, "default")
    c.print(f"[{style}]{escape(entry.render())}[/{style}]")

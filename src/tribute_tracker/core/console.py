"""Centralized Rich Console management.

A single Console instance shared by the command modules and the output helpers.
"""

from rich.console import Console

_console: Console | None = None


def get_console() -> Console:
    """Get or create the global Rich Console instance.

    Returns:
        Console: The global Rich Console instance
    """
    global _console
    if _console is None:
        _console = Console()
    return _console


def configure_console(use_colors: bool = True) -> Console:
    """Replace the global console, e.g. to disable colors from config."""
    global _console
    _console = Console(no_color=not use_colors)
    return _console

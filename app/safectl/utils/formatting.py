"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from safectl.core.theme import get_theme

# Display format of timestamps in tables
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


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


def create_config_table(title: str = "Configs") -> Table:
    """Create a pre-configured table for displaying stored configs.

    Args:
        title: Table title.

    Returns:
        Rich Table with Name, Value, Type, Version and LastModified columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Name", style="config.name", no_wrap=True)
    table.add_column("Value", overflow="fold")
    table.add_column("Type")
    table.add_column("Version", style="config.version", justify="right")
    table.add_column("LastModified", style="muted")
    return table


def format_time(value: datetime | None) -> str:
    """Format a timestamp in local time, or ``-`` when unknown."""
    if value is None:
        return "-"
    return value.astimezone().strftime(TIME_FORMAT)


def format_type(config_type: str) -> str:
    """Format a storage type with color markup."""
    if config_type == "SecureString":
        return f"[secure]{config_type}[/]"
    return config_type


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")

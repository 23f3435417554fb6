"""CLI package for safectl.

This package contains the Typer application and all subcommands.
"""

from safectl.cli.main import app

__all__ = ["app"]

"""CLI commands for safectl.

This package contains all subcommand implementations.
"""

from safectl.cli.commands import deploy, export, init, listing

__all__ = ["deploy", "export", "init", "listing"]

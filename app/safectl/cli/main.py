"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from pathlib import Path
from typing import Annotated

import typer

from safectl import __version__
from safectl.cli.commands import deploy, export, init, listing
from safectl.utils.log import configure_logging

# Create main Typer app
app = typer.Typer(
    name="safectl",
    help="Declarative configuration and secret deployment.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"safectl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to the project file (default: ./safectl.toml).",
            dir_okay=False,
        ),
    ] = None,
    stage: Annotated[
        str,
        typer.Option(
            "--stage",
            "-s",
            help="Stage to operate on.",
            envvar="SAFECTL_STAGE",
        ),
    ] = "dev",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """safectl - Declarative configuration and secret deployment.

    Declare configuration values and secrets in safectl.toml and deploy
    them to SSM Parameter Store, Secrets Manager, a GPG-encrypted file
    or a local JSON file.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["stage"] = stage
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(init.app, name="init")
app.add_typer(deploy.app, name="deploy")
app.add_typer(listing.app, name="list")
app.add_typer(export.app, name="export")


if __name__ == "__main__":
    app()

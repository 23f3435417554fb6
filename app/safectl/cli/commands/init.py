"""Init command implementation.

Creates a safectl.toml project file with a starter layout.
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from safectl.cli.types import get_options
from safectl.core.paths import get_project_path
from safectl.core.project import ProjectError, save_project
from safectl.models.project import DEFAULTS_SECTION, Project, Provider
from safectl.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Create a new project file.",
    invoke_without_command=True,
)


def _create_project(
    service: str,
    provider: Provider,
    region: str | None,
    filepath: str | None,
) -> Project:
    """Create a starter project with one example config and secret.

    Raises:
        ValidationError: If the provider settings are incomplete.
    """
    return Project(
        service=service,
        provider=provider,
        region=region,
        filepath=filepath,
        config={DEFAULTS_SECTION: {"LOG_LEVEL": "info"}},
        secret={DEFAULTS_SECTION: {"API_TOKEN": "Token used to call the upstream API"}},
    )


def _show_project_summary(project: Project, output_path: Path) -> None:
    """Display a summary of the created project."""
    console.print()
    console.print("[bold]Project Summary[/bold]")
    console.print(f"  Service: [info]{project.service}[/info]")
    console.print(f"  Provider: [info]{project.provider.value}[/info]")
    if project.region:
        console.print(f"  Region: [muted]{project.region}[/muted]")
    console.print(f"  Output: [muted]{output_path}[/muted]")
    console.print()


@app.callback(invoke_without_command=True)
def init_project(
    ctx: typer.Context,
    service: Annotated[
        str | None,
        typer.Option(
            "--service",
            help="Service name. Defaults to the current directory name.",
        ),
    ] = None,
    provider: Annotated[
        Provider,
        typer.Option(
            "--provider",
            "-p",
            help="Store provider.",
            case_sensitive=False,
        ),
    ] = Provider.LOCAL,
    region: Annotated[
        str | None,
        typer.Option(
            "--region",
            help="AWS region for the ssm and secrets-manager providers.",
        ),
    ] = None,
    filepath: Annotated[
        str | None,
        typer.Option(
            "--filepath",
            help="Store directory (local) or encrypted file (gpg).",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing project file.",
        ),
    ] = False,
) -> None:
    """Initialize a new project file.

    Examples:
        safectl init                                   # Local store
        safectl init -p ssm --region eu-west-1         # AWS SSM
        safectl init -p gpg --filepath secrets.gpg     # Encrypted file
        safectl -c deploy/safectl.toml init --force    # Custom path
    """
    if ctx.invoked_subcommand is not None:
        return

    options = get_options(ctx)
    output_path: Path = options.get("config") or get_project_path()

    if output_path.exists():
        if not force:
            print_error(f"Project file already exists: {output_path}")
            print_info("Use --force to overwrite.")
            raise typer.Exit(code=1)
        print_warning(f"Overwriting existing project file: {output_path}")

    name = service or output_path.resolve().parent.name

    try:
        project = _create_project(name, provider, region, filepath)
    except ValidationError as e:
        errors = "; ".join(str(err["msg"]) for err in e.errors())
        print_error(f"Invalid project settings: {errors}")
        raise typer.Exit(code=1) from e

    _show_project_summary(project, output_path)

    try:
        saved_path = save_project(project, output_path)
    except ProjectError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Project file created: {saved_path}")

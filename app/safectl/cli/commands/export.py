"""Export command implementation.

Writes the stored values of the declared configs in a machine readable
format, keyed by their short names.
"""

from pathlib import Path
from typing import Annotated

import typer

from safectl.cli.types import exit_with_error, load_context
from safectl.core.export import ExportFormat, export_configs
from safectl.errors import SafectlError
from safectl.utils.formatting import print_success

app = typer.Typer(
    help="Export stored configs as JSON, YAML, dotenv or TOML.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def export_params(
    ctx: typer.Context,
    fmt: Annotated[
        ExportFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = ExportFormat.JSON,
    output_file: Annotated[
        Path | None,
        typer.Option(
            "--output-file",
            "-o",
            help="Write to a file instead of standard output.",
        ),
    ] = None,
    keys: Annotated[
        list[str] | None,
        typer.Option(
            "--key",
            "-k",
            help="Export only this short key. Can be repeated.",
        ),
    ] = None,
) -> None:
    """Export stored values of the declared configs.

    Examples:
        safectl export                          # JSON to stdout
        safectl export -f dotenv -o .env        # Write a dotenv file
        safectl export -k DB_HOST -k DB_PORT    # Selected keys only
    """
    if ctx.invoked_subcommand is not None:
        return

    command = load_context(ctx)

    try:
        params = export_configs(
            command.store,
            command.project.all,
            fmt,
            output=output_file,
            keys=keys or (),
        )
    except SafectlError as e:
        exit_with_error(e)

    if output_file is not None:
        print_success(f"Exported {len(params)} value(s) to {output_file}")

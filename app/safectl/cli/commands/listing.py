"""List command for viewing stored configs.

This module provides the `safectl list` command for viewing the stored
state of every config and secret declared in the project file.
"""

import json
from typing import Annotated

import typer
from rich.markup import escape

from safectl.cli.types import exit_with_error, load_context
from safectl.core.listing import SortKey, list_configs
from safectl.errors import SafectlError
from safectl.models.config import SECURE_STRING_TYPE, Config
from safectl.utils.formatting import (
    console,
    create_config_table,
    format_time,
    format_type,
    print_info,
)

# Shown instead of secret values unless --show-secrets is passed
MASKED_VALUE = "********"

app = typer.Typer(
    name="list",
    help="List stored configs and secrets.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def list_params(
    ctx: typer.Context,
    sort: Annotated[
        SortKey,
        typer.Option(
            "--sort",
            "-S",
            help="Sort by name, version or modified time.",
            case_sensitive=False,
        ),
    ] = SortKey.NAME,
    show_secrets: Annotated[
        bool,
        typer.Option(
            "--show-secrets",
            help="Print secret values instead of masking them.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """List the stored state of every declared config.

    Names declared in the project file but not stored yet are left out.

    Examples:
        safectl list                  # Sorted by name
        safectl list -S version       # Sorted by numeric version
        safectl list -S modified      # Oldest change first
        safectl -s prod list --json   # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    command = load_context(ctx)

    try:
        configs = list_configs(command.store, command.project.all, sort)
    except SafectlError as e:
        exit_with_error(e, f"Failed to list params: {e}")

    if json_output:
        _print_json(configs, show_secrets)
        return

    _print_table(configs, show_secrets)
    print_info(f"Total parameters = {len(configs)}")


def _display_value(config: Config, show_secrets: bool) -> str:
    if config.type == SECURE_STRING_TYPE and not show_secrets:
        return MASKED_VALUE
    return config.value


def _print_table(configs: list[Config], show_secrets: bool) -> None:
    """Print configs as Rich table.

    Args:
        configs: Sorted configs to display.
        show_secrets: Whether secret values are printed in clear.
    """
    table = create_config_table(title="Parameters")
    for config in configs:
        table.add_row(
            escape(config.name),
            escape(_display_value(config, show_secrets)),
            format_type(config.type),
            config.version,
            format_time(config.modified),
        )
    console.print(table)


def _print_json(configs: list[Config], show_secrets: bool) -> None:
    """Print configs as JSON in the persisted record layout."""
    output = []
    for config in configs:
        record = config.to_record()
        record["Value"] = _display_value(config, show_secrets)
        output.append(record)
    typer.echo(json.dumps(output, indent=2))

"""Deploy command implementation.

Deploys every config and secret declared in the project file to the
configured store.
"""

from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from safectl.cli.prompt import CliPrompter
from safectl.cli.types import exit_with_error, load_context
from safectl.core.deploy import DeployEngine, DeployPlan, DeployResult, PromptMode
from safectl.core.export import make_generator
from safectl.errors import SafectlError
from safectl.models.config import ConfigInput
from safectl.utils.formatting import (
    console,
    format_type,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Deploy all configurations declared in the project file.",
    invoke_without_command=True,
)


def _create_plan_table(plan: DeployPlan) -> Table:
    """Create a Rich table displaying planned writes.

    Args:
        plan: Plan computed by the deploy engine.

    Returns:
        Rich Table with Action, Name and Type columns.
    """
    table = Table(
        title="Planned Changes (Dry Run)",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=8, justify="center")
    table.add_column("Name", no_wrap=True)
    table.add_column("Type")

    for config in plan.creates:
        table.add_row("[added]+create[/]", escape(config.name), format_type(config.type))
    for config in plan.updates:
        table.add_row("[changed]~update[/]", escape(config.name), format_type(config.type))
    for config in plan.missing:
        table.add_row("[warning]?prompt[/]", escape(config.name), format_type(config.type))

    return table


def _create_written_table(written: tuple[ConfigInput, ...], orphans: tuple[ConfigInput, ...]) -> Table:
    """Create a Rich table displaying written and removed entries."""
    table = Table(
        title="Deployed",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=8, justify="center")
    table.add_column("Name", no_wrap=True)
    table.add_column("Type")

    for config in written:
        table.add_row("[added]write[/]", escape(config.name), format_type(config.type))
    for config in orphans:
        table.add_row("[removed]-delete[/]", escape(config.name), "")

    return table


def _print_result(result: DeployResult, remove_orphans: bool) -> None:
    """Print the outcome of a deploy."""
    if result.written or result.orphans:
        console.print(_create_written_table(result.written, result.orphans))

    if remove_orphans and result.orphan_error is None:
        print_info(f"orphans removed = {len(result.orphans)}.")

    for generated in result.generated:
        if generated.success:
            print_info(f"wrote file -> {generated.path}")
        else:
            print_warning(str(generated.error))

    print_success(f"new configs = {len(result.written)}")


@app.callback(invoke_without_command=True)
def deploy_project(
    ctx: typer.Context,
    prompt: Annotated[
        PromptMode,
        typer.Option(
            "--prompt",
            "-p",
            help="Prompt for secrets: off, missing or all.",
            case_sensitive=False,
        ),
    ] = PromptMode.OFF,
    remove_orphans: Annotated[
        bool,
        typer.Option(
            "--remove-orphans",
            "-r",
            help="Remove stored configs under the prefix that are no longer declared.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be written without making changes.",
        ),
    ] = False,
    hide_input: Annotated[
        bool,
        typer.Option(
            "--hide-input",
            help="Do not echo secret values while prompting.",
        ),
    ] = False,
) -> None:
    """Deploy configs and secrets to the store.

    Values that already match the store are not written again, so
    re-running deploy without changes performs no writes.

    Examples:
        safectl deploy --dry-run           # Preview changes
        safectl deploy -p missing          # Prompt for secrets not yet stored
        safectl deploy -p all              # Review every secret
        safectl -s prod deploy -r          # Deploy prod and prune orphans
    """
    if ctx.invoked_subcommand is not None:
        return

    command = load_context(ctx)
    project = command.project

    generator = make_generator(
        command.store,
        project.all,
        base_dir=command.project_path.parent,
    )
    engine = DeployEngine(
        command.store,
        prompter=CliPrompter(hide_input=hide_input),
        generator=generator,
    )

    if dry_run:
        try:
            plan = engine.plan(project.configs, project.secrets)
        except SafectlError as e:
            exit_with_error(e)

        if plan.is_in_sync:
            print_success("All configs are up to date. Nothing to do.")
        else:
            console.print(_create_plan_table(plan))
        print_info("\nDry-run mode: No changes were made.")
        return

    try:
        result = engine.deploy(
            configs=project.configs,
            secrets=project.secrets,
            prefix=project.prefix,
            prompt_mode=prompt,
            remove_orphans=remove_orphans,
            generate=project.generate,
        )
    except SafectlError as e:
        exit_with_error(e)

    _print_result(result, remove_orphans)

    if result.orphan_error is not None:
        print_error(f"failed to remove orphans: {result.orphan_error}")
        raise typer.Exit(code=1)

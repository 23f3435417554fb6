"""Shared types and helpers for CLI commands.

Commands load the project file, resolve it for the selected stage and
build the store once through these helpers; the store is then passed
explicitly to the engine or reader that needs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.markup import escape

from safectl.core.paths import get_project_path
from safectl.core.project import StackOutputsReader, require_project, resolve_project
from safectl.errors import SafectlError
from safectl.models.project import DEFAULT_STAGE, ResolvedProject
from safectl.stores.base import Store
from safectl.stores.factory import StoreSettings, get_store
from safectl.utils.formatting import err_console, print_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandContext:
    """Resolved project and store shared by a command run.

    Attributes:
        project: Project resolved for the selected stage.
        store: Store built from the project settings.
        project_path: Location of the project file.
    """

    project: ResolvedProject
    store: Store
    project_path: Path


def get_options(ctx: typer.Context) -> dict[str, Any]:
    """Return the global options stored by the root callback."""
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return obj


def exit_with_error(error: BaseException, message: str | None = None) -> NoReturn:
    """Print an error with its cause chain and exit with code 1."""
    print_error(message or str(error))
    cause = error.__cause__
    while cause is not None:
        err_console.print(f"  [muted]caused by:[/] {type(cause).__name__}: {escape(str(cause))}")
        cause = cause.__cause__
    raise typer.Exit(code=1) from error


def resolve_current_project(ctx: typer.Context) -> tuple[ResolvedProject, Path]:
    """Load and resolve the project selected by the global options.

    Raises:
        typer.Exit: If the project cannot be loaded or resolved.
    """
    options = get_options(ctx)
    path: Path = options.get("config") or get_project_path()
    stage: str = options.get("stage") or DEFAULT_STAGE

    project = require_project(path)

    stack_reader: StackOutputsReader | None = None
    if project.stacks:
        stack_reader = _stack_reader(project.region)

    try:
        resolved = resolve_project(project, stage, stack_outputs=stack_reader)
    except SafectlError as e:
        exit_with_error(e, f"Failed to resolve project: {e}")

    logger.debug(
        "Resolved project %s for stage %s: %d config(s), %d secret(s)",
        resolved.service,
        resolved.stage,
        len(resolved.configs),
        len(resolved.secrets),
    )
    return resolved, path


def _stack_reader(region: str | None) -> StackOutputsReader:
    """Build a reader for CloudFormation outputs in ``region``."""

    def read(stacks: list[str]) -> dict[str, str]:
        from safectl.aws.cloudformation import StackOutputs

        return StackOutputs.for_region(region).get_outputs(stacks)

    return read


def load_context(ctx: typer.Context) -> CommandContext:
    """Load the project and build its store.

    Raises:
        typer.Exit: If the project or store cannot be set up.
    """
    project, path = resolve_current_project(ctx)
    try:
        store = get_store(StoreSettings.from_project(project, base_dir=path.parent))
    except SafectlError as e:
        exit_with_error(e, f"Failed to instantiate store: {e}")
    return CommandContext(project=project, store=store, project_path=path)

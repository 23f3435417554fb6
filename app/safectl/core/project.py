"""Project file I/O and resolution.

This module provides functions for loading and saving safectl.toml
files with validation using Pydantic models, and for resolving a
project into the concrete entries of one stage.
"""

from __future__ import annotations

import logging
import os
import re
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
from pydantic import ValidationError

from safectl.core.paths import get_project_path
from safectl.errors import ConfigurationError
from safectl.models.config import ConfigInput
from safectl.models.project import (
    DEFAULT_PREFIX,
    DEFAULTS_SECTION,
    SHARED_SECTION,
    Project,
    ResolvedProject,
)

logger = logging.getLogger(__name__)

# {{ name }} placeholders in values and the prefix
_PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z0-9_.\-]+)\s*\}\}")

# Reads outputs of the given CloudFormation stacks
StackOutputsReader = Callable[[list[str]], dict[str, str]]


class ProjectError(ConfigurationError):
    """Base exception for project file errors."""


class ProjectNotFoundError(ProjectError):
    """Raised when the project file is not found."""


class ProjectParseError(ProjectError):
    """Raised when the project file cannot be parsed."""


class ProjectValidationError(ProjectError):
    """Raised when the project content is invalid."""


def load_project(path: Path | None = None) -> Project:
    """Load and validate a project from a TOML file.

    Args:
        path: Path to the project file. If None, uses the default path.

    Returns:
        Validated Project object.

    Raises:
        ProjectNotFoundError: If the project file doesn't exist.
        ProjectParseError: If the TOML syntax is invalid.
        ProjectValidationError: If the content doesn't match the schema.
    """
    project_path = path or get_project_path()

    if not project_path.exists():
        raise ProjectNotFoundError(f"Project file not found: {project_path}")

    try:
        with open(project_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ProjectParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ProjectError(f"Failed to read project file: {e}") from e

    try:
        return Project.model_validate(data)
    except ValidationError as e:
        raise ProjectValidationError(f"Invalid project content: {e}") from e


def save_project(project: Project, path: Path | None = None) -> Path:
    """Save a project to a TOML file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        project: The Project object to save.
        path: Path to save the project. If None, uses the default path.

    Returns:
        Path where the project was saved.

    Raises:
        ProjectError: If the file cannot be written.
    """
    project_path = path or get_project_path()
    project_path.parent.mkdir(parents=True, exist_ok=True)

    data = _project_to_dict(project)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=project_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(project_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ProjectError(f"Failed to write project file: {e}") from e

    return project_path


def resolve_project(
    project: Project,
    stage: str,
    stack_outputs: StackOutputsReader | None = None,
) -> ResolvedProject:
    """Resolve a project into the entries of one stage.

    Plain values are the ``defaults`` section overlaid with the stage
    section and named ``{prefix}{KEY}``; ``shared`` values are named
    ``/{stage}/shared/{KEY}``. Secrets follow the same overlay and carry
    their declared text as description.

    Args:
        project: The validated project.
        stage: Stage to resolve for.
        stack_outputs: Reader for CloudFormation stack outputs. Only
            called when the project declares stacks.

    Returns:
        ResolvedProject with every placeholder substituted.

    Raises:
        ProjectValidationError: If a placeholder cannot be resolved.
    """
    if not stage:
        raise ProjectValidationError("stage cannot be empty")

    variables: dict[str, str] = {"stage": stage, "service": project.service}
    if project.region:
        variables["region"] = project.region

    if project.stacks:
        if stack_outputs is None:
            raise ProjectValidationError("project declares stacks but no stack reader is set")
        stacks = [_render(s, variables, "stacks") for s in project.stacks]
        outputs = stack_outputs(stacks)
        logger.debug("Loaded %d output(s) from %d stack(s)", len(outputs), len(stacks))
        # Built-in variables win over stack outputs of the same name
        variables = {**outputs, **variables}

    prefix = _render(project.prefix or DEFAULT_PREFIX, variables, "prefix")
    if not prefix.endswith("/"):
        prefix += "/"

    configs: list[ConfigInput] = []
    for key, value in _overlay(project.config, stage).items():
        configs.append(ConfigInput(name=f"{prefix}{key}", value=_render(value, variables, key)))

    shared_path = f"/{stage}/{SHARED_SECTION}/"
    for key, value in project.config.get(SHARED_SECTION, {}).items():
        configs.append(
            ConfigInput(name=f"{shared_path}{key}", value=_render(value, variables, key))
        )

    secrets = [
        ConfigInput(name=f"{prefix}{key}", secret=True, description=description)
        for key, description in _overlay(project.secret, stage).items()
    ]

    names = [c.name for c in configs] + [s.name for s in secrets]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ProjectValidationError(
            f"keys declared as both config and secret: {', '.join(duplicates)}"
        )

    return ResolvedProject(
        service=project.service,
        stage=stage,
        provider=project.provider,
        region=project.region,
        filepath=project.filepath,
        prefix=prefix,
        gpg_recipients=tuple(project.gpg_recipients),
        configs=tuple(configs),
        secrets=tuple(secrets),
        generate=tuple(
            t.model_copy(update={"path": _render(t.path, variables, "generate")})
            for t in project.generate
        ),
    )


def require_project(project_path: Path | None = None) -> Project:
    """Load project or exit with helpful error message.

    Args:
        project_path: Optional custom project path.

    Returns:
        Loaded and validated Project.

    Raises:
        typer.Exit: If the project cannot be loaded.
    """
    import typer

    from safectl.utils.formatting import print_error, print_info

    path = project_path or get_project_path()
    try:
        return load_project(path)
    except ProjectNotFoundError as e:
        print_error(f"Project file not found: {path}")
        print_info("Run 'safectl init' to create one.")
        raise typer.Exit(code=1) from e
    except ProjectError as e:
        print_error(f"Failed to load project file: {e}")
        raise typer.Exit(code=1) from e


def _overlay(sections: Mapping[str, Mapping[str, str]], stage: str) -> dict[str, str]:
    """Merge the defaults section with the stage section."""
    return {**sections.get(DEFAULTS_SECTION, {}), **sections.get(stage, {})}


def _render(template: str, variables: Mapping[str, str], context: str) -> str:
    """Substitute ``{{ name }}`` placeholders.

    Raises:
        ProjectValidationError: If a placeholder has no value.
    """

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            raise ProjectValidationError(f"unresolved placeholder '{{{{{name}}}}}' in {context}")
        return variables[name]

    return _PLACEHOLDER_RE.sub(replace, template)


def _project_to_dict(project: Project) -> dict[str, Any]:
    """Convert a Project to a dictionary suitable for TOML serialization.

    Optional settings are only written when set.
    """
    result: dict[str, Any] = {
        "service": project.service,
        "provider": project.provider.value,
    }
    for name in ("region", "filepath", "prefix"):
        value = getattr(project, name)
        if value:
            result[name] = value
    if project.stacks:
        result["stacks"] = list(project.stacks)
    if project.gpg_recipients:
        result["gpg_recipients"] = list(project.gpg_recipients)
    if project.config:
        result["config"] = {k: dict(v) for k, v in project.config.items()}
    if project.secret:
        result["secret"] = {k: dict(v) for k, v in project.secret.items()}
    if project.generate:
        result["generate"] = [{"type": t.type, "path": t.path} for t in project.generate]
    return result

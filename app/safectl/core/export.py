"""Export of stored configs to JSON, YAML, dotenv and TOML.

Exports are keyed by the short name of each config (the last segment of
its full name). The same serializers back the files generated after a
deploy.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import TYPE_CHECKING

import tomli_w
import yaml

from safectl.errors import ConfigurationError, NotFoundError, StoreError
from safectl.models.config import Config, ConfigInput

if TYPE_CHECKING:
    from safectl.core.deploy import FileGenerator
    from safectl.models.project import GenerateTarget
    from safectl.stores.base import Store

logger = logging.getLogger(__name__)

# Characters escaped inside double-quoted dotenv values
DOUBLE_QUOTE_SPECIAL_CHARS = '\\\n\r"!$`'


class ExportFormat(str, Enum):
    """Supported export formats."""

    JSON = "json"
    YAML = "yaml"
    DOTENV = "dotenv"
    TOML = "toml"


def parse_format(value: str) -> ExportFormat:
    """Parse an export format name, case-insensitively.

    Raises:
        ConfigurationError: If the format is not supported.
    """
    try:
        return ExportFormat(value.lower())
    except ValueError:
        raise ConfigurationError(f"unsupported export format: {value}") from None


def select_inputs(inputs: Iterable[ConfigInput], keys: Iterable[str]) -> list[ConfigInput]:
    """Restrict inputs to the given short keys.

    Args:
        inputs: Every declared entry.
        keys: Short keys to keep. Empty keeps every input.

    Returns:
        Selected inputs in key order.

    Raises:
        NotFoundError: If a key is not declared.
    """
    inputs = list(inputs)
    keys = list(keys)
    if not keys:
        return inputs

    by_key: dict[str, ConfigInput] = {}
    for config in inputs:
        by_key.setdefault(config.key(), config)

    result: list[ConfigInput] = []
    for key in keys:
        if key not in by_key:
            raise NotFoundError(f"key '{key}' is not found in project file")
        result.append(by_key[key])
    return result


def to_params(configs: Iterable[Config]) -> dict[str, str]:
    """Map short keys to values."""
    return {config.key(): config.value for config in configs}


def _double_quote_escape(value: str) -> str:
    for char in DOUBLE_QUOTE_SPECIAL_CHARS:
        if char == "\n":
            replacement = "\\n"
        elif char == "\r":
            replacement = "\\r"
        else:
            replacement = "\\" + char
        value = value.replace(char, replacement)
    return value


def _dotenv_key(key: str) -> str:
    return key.upper().replace("-", "_")


def render(params: dict[str, str], fmt: ExportFormat) -> str:
    """Serialize params in the given format.

    Keys are sorted in every format.
    """
    ordered = {key: params[key] for key in sorted(params)}

    if fmt == ExportFormat.JSON:
        return json.dumps(ordered, indent=2) + "\n"
    if fmt == ExportFormat.YAML:
        return yaml.safe_dump(ordered, default_flow_style=False, allow_unicode=True)
    if fmt == ExportFormat.TOML:
        return tomli_w.dumps(ordered)
    return "".join(
        f'{_dotenv_key(key)}="{_double_quote_escape(value)}"\n' for key, value in ordered.items()
    )


def write_export(params: dict[str, str], fmt: ExportFormat, output: Path | None = None) -> None:
    """Write serialized params to a file or standard output.

    Files are written atomically with mode 0600.

    Raises:
        StoreError: If the output file cannot be written.
    """
    content = render(params, fmt)

    if output is None:
        sys.stdout.write(content)
        sys.stdout.flush()
        return

    tmp_path: Path | None = None
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=output.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
        os.chmod(tmp_path, 0o600)
        os.replace(str(tmp_path), str(output))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise StoreError(f"Failed to open output file for writing: {e}") from e

    logger.debug("Exported %d value(s) to %s", len(params), output)


def export_configs(
    store: Store,
    inputs: Iterable[ConfigInput],
    fmt: ExportFormat,
    output: Path | None = None,
    keys: Iterable[str] = (),
) -> dict[str, str]:
    """Read the selected configs from ``store`` and export them.

    Returns:
        The exported params.

    Raises:
        NotFoundError: If a requested key is not declared.
        StoreError: If the store cannot be read or the output written.
    """
    selected = select_inputs(inputs, keys)
    params = to_params(store.get_many(selected))
    write_export(params, fmt, output)
    return params


def make_generator(
    store: Store,
    inputs: Iterable[ConfigInput],
    base_dir: Path | None = None,
) -> FileGenerator:
    """Build the file generator used after a deploy.

    Args:
        store: Store to read the deployed values from.
        inputs: Every declared entry.
        base_dir: Directory relative target paths are resolved against.

    Returns:
        Callable writing one generate target and returning its path.
    """
    inputs = list(inputs)

    def generate(target: GenerateTarget) -> Path:
        path = Path(target.path)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        export_configs(store, inputs, parse_format(target.type), path)
        return path

    return generate

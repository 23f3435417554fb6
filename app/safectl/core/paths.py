"""XDG-compliant path management for safectl.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and state storage, plus the default
location of the project file.

XDG defaults:
- Config: ~/.config/safectl/
- State: ~/.local/state/safectl/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "safectl"

PROJECT_FILENAME = "safectl.toml"
LOCAL_STORE_FILENAME = "safectl.json"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/safectl/ (or XDG_CONFIG_HOME/safectl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    Returns:
        Path to ~/.local/state/safectl/ (or XDG_STATE_HOME/safectl/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_project_path() -> Path:
    """Get the default project file path.

    The project file is looked up in the current working directory,
    unless SAFECTL_CONFIG points somewhere else.

    Returns:
        Path to ./safectl.toml.
    """
    override = os.environ.get("SAFECTL_CONFIG")
    if override:
        return Path(override)
    return Path.cwd() / PROJECT_FILENAME


def get_local_store_dir() -> Path:
    """Get the default directory of the local store.

    Returns:
        Path to ~/.local/state/safectl/stores/.
    """
    return get_state_dir() / "stores"


def get_user_theme_path() -> Path:
    """Get the user theme configuration path.

    Returns:
        Path to ~/.config/safectl/theme.toml.
    """
    return get_config_dir() / "theme.toml"


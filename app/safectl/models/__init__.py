"""Data models for safectl.

This module exports the core data structures used throughout the application.
"""

from safectl.models.config import (
    SECURE_STRING_TYPE,
    STRING_TYPE,
    Config,
    ConfigInput,
    config_type,
)
from safectl.models.project import (
    GenerateTarget,
    Project,
    Provider,
    ResolvedProject,
)

__all__ = [
    "SECURE_STRING_TYPE",
    "STRING_TYPE",
    "Config",
    "ConfigInput",
    "GenerateTarget",
    "Project",
    "Provider",
    "ResolvedProject",
    "config_type",
]

"""Project file models for declarative configuration.

This module defines the Pydantic models representing the safectl.toml
structure that declares the desired configuration and secrets of a
service, plus the resolved form consumed by the deploy engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from safectl.models.config import ConfigInput

# Section names inside [config] and [secret] with special meaning
DEFAULTS_SECTION = "defaults"
SHARED_SECTION = "shared"

DEFAULT_PREFIX = "/{{stage}}/{{service}}/"
DEFAULT_STAGE = "dev"

# Type alias for supported export/generate formats
ExportFormatType = Literal["json", "yaml", "dotenv", "toml"]


class Provider(str, Enum):
    """Available store providers."""

    SSM = "ssm"
    SECRETS_MANAGER = "secrets-manager"
    GPG = "gpg"
    LOCAL = "local"


# Providers backed by an AWS regional service
REMOTE_PROVIDERS = (Provider.SSM, Provider.SECRETS_MANAGER)


class GenerateTarget(BaseModel):
    """A file written from the resolved values after a deploy.

    Attributes:
        type: Output format.
        path: Destination file path.
    """

    model_config = ConfigDict(extra="forbid")

    type: Annotated[ExportFormatType, Field(description="Output format")]
    path: Annotated[str, Field(min_length=1, description="Destination file path")]


class Project(BaseModel):
    """Complete project declaration.

    Attributes:
        service: Service name, used in the default prefix.
        provider: Store provider the values are deployed to.
        region: AWS region for remote providers.
        filepath: Directory (local) or encrypted file (gpg).
        prefix: Name prefix template, defaults to ``/{{stage}}/{{service}}/``.
        stacks: CloudFormation stacks whose outputs can be referenced.
        gpg_recipients: Key ids the gpg store encrypts to.
        config: Plain values by section (defaults, shared, or a stage name).
        secret: Secret descriptions by section (defaults or a stage name).
        generate: Files to write after a successful deploy.
    """

    model_config = ConfigDict(extra="forbid")

    service: Annotated[str, Field(min_length=1, description="Service name")]
    provider: Annotated[Provider, Field(description="Store provider")] = Provider.LOCAL
    region: Annotated[str | None, Field(description="AWS region")] = None
    filepath: Annotated[str | None, Field(description="Store directory or file")] = None
    prefix: Annotated[str | None, Field(description="Name prefix template")] = None
    stacks: Annotated[
        list[str],
        Field(default_factory=list, description="CloudFormation stacks"),
    ]
    gpg_recipients: Annotated[
        list[str],
        Field(default_factory=list, description="GPG recipients"),
    ]
    config: Annotated[
        dict[str, dict[str, str]],
        Field(default_factory=dict, description="Plain values by section"),
    ]
    secret: Annotated[
        dict[str, dict[str, str]],
        Field(default_factory=dict, description="Secret descriptions by section"),
    ]
    generate: Annotated[
        list[GenerateTarget],
        Field(default_factory=list, description="Files to generate"),
    ]

    @field_validator("config", "secret", mode="before")
    @classmethod
    def stringify_values(cls, v: Any) -> Any:
        """Accept TOML scalars (numbers, booleans) as string values."""
        if not isinstance(v, dict):
            return v
        result: dict[str, Any] = {}
        for section, values in v.items():
            if isinstance(values, dict):
                result[section] = {
                    key: _scalar_to_str(value) for key, value in values.items()
                }
            else:
                result[section] = values
        return result

    @field_validator("secret")
    @classmethod
    def validate_secret_sections(cls, v: dict[str, dict[str, str]]) -> dict[str, dict[str, str]]:
        """Secrets cannot be shared across services."""
        if SHARED_SECTION in v:
            msg = "secrets cannot be declared in a 'shared' section"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_provider_settings(self) -> Project:
        """Validate that the provider has the parameters it needs."""
        if self.provider in REMOTE_PROVIDERS and not self.region:
            msg = f"provider '{self.provider.value}' requires a region"
            raise ValueError(msg)
        if self.provider == Provider.GPG and not self.filepath:
            msg = "provider 'gpg' requires a filepath"
            raise ValueError(msg)
        return self


def _scalar_to_str(value: Any) -> Any:
    """Convert TOML scalars to their string form, booleans in lowercase."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    return value


@dataclass(frozen=True, slots=True)
class ResolvedProject:
    """Project declaration resolved for one stage.

    All placeholders are substituted and every entry carries its full name.

    Attributes:
        service: Service name.
        stage: Stage the project was resolved for.
        provider: Store provider.
        region: AWS region, if any.
        filepath: Store directory or file, if any.
        prefix: Resolved name prefix, always ending in ``/``.
        gpg_recipients: GPG recipients.
        configs: Plain entries.
        secrets: Secret entries.
        generate: Files to write after a deploy.
    """

    service: str
    stage: str
    provider: Provider
    region: str | None
    filepath: str | None
    prefix: str
    gpg_recipients: tuple[str, ...]
    configs: tuple[ConfigInput, ...]
    secrets: tuple[ConfigInput, ...]
    generate: tuple[GenerateTarget, ...] = ()

    @property
    def all(self) -> tuple[ConfigInput, ...]:
        """Every tracked entry: plain entries followed by secrets."""
        return self.configs + self.secrets

    @property
    def tracked_names(self) -> frozenset[str]:
        """Names of every tracked entry."""
        return frozenset(c.name for c in self.all)

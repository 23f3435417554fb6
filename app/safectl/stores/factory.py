"""Store factory.

The factory is the only place that consumes provider specific
construction parameters. Callers build one store at startup and pass
it to the commands that need it.

A relative ``filepath`` is resolved against ``StoreSettings.base_dir``.
The CLI sets it to the directory of the project file, the same base
used for generate targets, so the store does not depend on the
working directory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from safectl.core.paths import LOCAL_STORE_FILENAME, get_local_store_dir
from safectl.errors import ConfigurationError
from safectl.models.project import Provider, ResolvedProject
from safectl.stores.base import Store
from safectl.stores.gpg import GpgStore
from safectl.stores.local import LocalStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoreSettings:
    """Connection parameters for a store.

    Attributes:
        provider: Provider identifier, e.g. "ssm" or "local".
        region: AWS region for remote providers.
        filepath: Directory (local) or encrypted file (gpg).
        stage: Stage qualifier for the local store file name.
        gpg_recipients: Recipients for the gpg store.
        base_dir: Directory a relative filepath is resolved against.
    """

    provider: str
    region: str | None = None
    filepath: str | None = None
    stage: str = ""
    gpg_recipients: tuple[str, ...] = ()
    base_dir: Path | None = None

    @classmethod
    def from_project(cls, project: ResolvedProject, base_dir: Path | None = None) -> StoreSettings:
        """Build settings from a resolved project."""
        return cls(
            provider=project.provider.value,
            region=project.region,
            filepath=project.filepath,
            stage=project.stage,
            gpg_recipients=project.gpg_recipients,
            base_dir=base_dir,
        )

    def resolved_filepath(self) -> Path | None:
        """Return ``filepath`` anchored at ``base_dir`` when it is relative."""
        if not self.filepath:
            return None
        path = Path(self.filepath).expanduser()
        if self.base_dir is not None and not path.is_absolute():
            path = self.base_dir / path
        return path


def parse_provider(value: str) -> Provider:
    """Parse a provider identifier.

    Raises:
        ConfigurationError: If the identifier is unknown.
    """
    try:
        return Provider(value)
    except ValueError:
        raise ConfigurationError(f"invalid provider `{value}`") from None


def get_store(settings: StoreSettings) -> Store:
    """Construct the store selected by ``settings.provider``.

    The AWS backends are imported on demand so that file stores work
    without loading boto3.

    Args:
        settings: Provider identifier and connection parameters.

    Returns:
        A ready-to-use store.

    Raises:
        ConfigurationError: If the provider is unknown or a required
            parameter is missing.
        StoreError: If the backing medium cannot be initialized.
    """
    provider = parse_provider(settings.provider)
    logger.debug("Creating %s store", provider.value)

    if provider == Provider.SSM:
        from safectl.stores.ssm import SsmStore

        return SsmStore.for_region(settings.region)

    if provider == Provider.SECRETS_MANAGER:
        from safectl.stores.secrets_manager import SecretsManagerStore

        return SecretsManagerStore.for_region(settings.region)

    filepath = settings.resolved_filepath()

    if provider == Provider.GPG:
        if filepath is None:
            raise ConfigurationError("invalid parameter: filepath is required for gpg")
        return GpgStore(filepath, settings.gpg_recipients)

    directory = filepath or get_local_store_dir()
    return LocalStore(directory=directory, filename=LOCAL_STORE_FILENAME, stage=settings.stage)

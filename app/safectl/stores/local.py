"""Local JSON file store.

Persists the whole record set as one JSON list at
``{directory}/{stage}-{filename}`` (or ``{directory}/{filename}`` when no
stage is given).
"""

import logging
from pathlib import Path

from safectl.core.paths import LOCAL_STORE_FILENAME
from safectl.errors import ConfigurationError, StoreError
from safectl.models.config import Config, ConfigInput
from safectl.stores.base import Store
from safectl.stores.records import (
    apply_delete,
    apply_put,
    dumps_records,
    loads_records,
    locked,
    select_names,
    select_prefix,
    write_atomic,
)

logger = logging.getLogger(__name__)


def local_store_filename(filename: str, stage: str = "") -> str:
    """Build the file name of a local store for a stage."""
    if stage:
        return f"{stage}-{filename}"
    return filename


class LocalStore(Store):
    """Store backed by a plain JSON file.

    Every operation reads the whole collection, applies its change and
    writes the whole collection back while holding an exclusive lock,
    so each call is atomic from the caller's point of view.

    Attributes:
        path: Location of the JSON file.
    """

    def __init__(
        self,
        directory: Path,
        filename: str = LOCAL_STORE_FILENAME,
        stage: str = "",
    ) -> None:
        """Initialize the store and create its directory.

        Args:
            directory: Directory holding the store file.
            filename: Base file name.
            stage: Optional stage qualifier prepended to the file name.

        Raises:
            ConfigurationError: If directory or filename is empty.
            StoreError: If the directory cannot be created.
        """
        if not str(directory):
            raise ConfigurationError("invalid parameter: directory is required")
        if not filename:
            raise ConfigurationError("invalid parameter: filename is required")

        self._dir = Path(directory)
        self._path = self._dir / local_store_filename(filename, stage)

        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create store directory {self._dir}: {e}") from e

    @property
    def path(self) -> Path:
        """Location of the JSON file."""
        return self._path

    def put_many(self, configs: list[ConfigInput]) -> None:
        if not configs:
            return
        with locked(self._path):
            updated = apply_put(self._read(), configs)
            write_atomic(self._path, dumps_records(updated))
        logger.debug("Wrote %d config(s) to %s", len(configs), self._path)

    def get_many(self, configs: list[ConfigInput]) -> list[Config]:
        if not configs:
            return []
        with locked(self._path):
            existing = self._read()
        return select_names(existing, configs)

    def get_by_path(self, prefix: str) -> list[Config]:
        with locked(self._path):
            existing = self._read()
        return select_prefix(existing, prefix)

    def delete_many(self, configs: list[ConfigInput]) -> None:
        if not configs:
            return
        with locked(self._path):
            remaining = apply_delete(self._read(), configs)
            write_atomic(self._path, dumps_records(remaining))
        logger.debug("Deleted up to %d config(s) from %s", len(configs), self._path)

    def _read(self) -> list[Config]:
        """Read the whole collection; a missing file is an empty collection.

        Raises:
            StoreError: If the file exists but cannot be read.
            CorruptStateError: If the file content cannot be parsed.
        """
        try:
            data = self._path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StoreError(f"Failed to read {self._path}: {e}") from e
        return loads_records(data, str(self._path))

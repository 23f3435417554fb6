"""GPG-encrypted file store.

Keeps the same JSON record collection as the local store, encrypted
with ``gpg`` to one or more recipients. Encryption and decryption are
delegated to the ``gpg`` executable.
"""

import logging
import subprocess
from pathlib import Path

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
from safectl.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

GPG_COMMAND = "gpg"


class GpgStore(Store):
    """Store backed by a GPG-encrypted JSON file.

    The existing file is decrypted once by the constructor so that a
    missing key or a damaged file is reported before any operation.
    """

    def __init__(self, path: Path, recipients: list[str] | tuple[str, ...]) -> None:
        """Initialize the store and verify the file can be decrypted.

        Args:
            path: Location of the encrypted file.
            recipients: Key ids or emails to encrypt to.

        Raises:
            ConfigurationError: If gpg is not installed, no path or no
                recipient is given.
            StoreError: If the existing file cannot be decrypted or the
                parent directory cannot be created.
            CorruptStateError: If the decrypted content cannot be parsed.
        """
        if not str(path):
            raise ConfigurationError("invalid parameter: filepath is required for gpg")
        if not recipients:
            raise ConfigurationError("invalid parameter: at least one gpg recipient is required")
        if not command_exists(GPG_COMMAND):
            raise ConfigurationError(f"'{GPG_COMMAND}' executable not found in PATH")

        self._path = Path(path)
        self._recipients = tuple(recipients)

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create store directory {self._path.parent}: {e}") from e

        with locked(self._path):
            self._read()

    @property
    def path(self) -> Path:
        """Location of the encrypted file."""
        return self._path

    def put_many(self, configs: list[ConfigInput]) -> None:
        if not configs:
            return
        with locked(self._path):
            updated = apply_put(self._read(), configs)
            self._write(updated)
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
            self._write(apply_delete(self._read(), configs))

    def _read(self) -> list[Config]:
        """Decrypt and parse the collection; a missing file is empty.

        Raises:
            StoreError: If decryption fails.
            CorruptStateError: If the decrypted content cannot be parsed.
        """
        if not self._path.exists():
            return []

        try:
            result = run_command(
                [GPG_COMMAND, "--batch", "--quiet", "--decrypt", str(self._path)],
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise StoreError(f"Failed to run {GPG_COMMAND}: {e}") from e

        if not result.success:
            raise StoreError(f"Failed to decrypt {self._path}: {result.error_text}")

        return loads_records(result.stdout, str(self._path))

    def _write(self, configs: list[Config]) -> None:
        """Encrypt and atomically replace the collection.

        Raises:
            StoreError: If encryption or the write fails.
        """
        args = [GPG_COMMAND, "--batch", "--yes", "--quiet", "--encrypt"]
        for recipient in self._recipients:
            args.extend(["--recipient", recipient])

        try:
            result = run_command(args, input_data=dumps_records(configs))
        except (OSError, subprocess.SubprocessError) as e:
            raise StoreError(f"Failed to run {GPG_COMMAND}: {e}") from e

        if not result.success:
            raise StoreError(f"Failed to encrypt {self._path}: {result.error_text}")

        write_atomic(self._path, result.stdout)

"""Abstract base class for configuration stores.

This module defines the Store interface that every backend (local file,
GPG-encrypted file, SSM Parameter Store, Secrets Manager) implements.
"""

from abc import ABC, abstractmethod

from safectl.models.config import Config, ConfigInput


class Store(ABC):
    """Abstract base class for all configuration stores.

    A store owns the persisted Config records of one backing medium.
    Names are unique within a store. Every write to an existing name
    increments its version by one; new names start at version "1".

    Failures to reach or initialize the medium are raised by the
    constructor of the concrete store so callers fail before any read
    or write.

    Example:
        >>> store = LocalStore(directory=Path(".safectl"), stage="dev")
        >>> store.put(ConfigInput(name="/dev/api/DB_HOST", value="localhost"))
        >>> store.get(ConfigInput(name="/dev/api/DB_HOST")).version
        '1'
    """

    def put(self, config: ConfigInput) -> None:
        """Upsert a single entry.

        Args:
            config: Entry to write.

        Raises:
            StoreError: If the write fails.
        """
        self.put_many([config])

    @abstractmethod
    def put_many(self, configs: list[ConfigInput]) -> None:
        """Upsert a batch of entries.

        Existing names get their value, type and modified time replaced
        and their version incremented; new names are created at "1".

        Args:
            configs: Entries to write.

        Raises:
            StoreError: If the batch cannot be written.
        """

    def get(self, config: ConfigInput) -> Config | None:
        """Look up the current record for a name.

        Args:
            config: Entry whose name is looked up.

        Returns:
            The stored Config, or None if the name is absent.

        Raises:
            StoreError: If the store cannot be read.
        """
        found = self.get_many([config])
        return found[0] if found else None

    @abstractmethod
    def get_many(self, configs: list[ConfigInput]) -> list[Config]:
        """Look up a set of names.

        Names that are not stored are omitted from the result, so the
        result may be shorter than the input.

        Args:
            configs: Entries whose names are looked up.

        Returns:
            Stored records for the names that exist, in input order.

        Raises:
            StoreError: If the store cannot be read.
        """

    @abstractmethod
    def get_by_path(self, prefix: str) -> list[Config]:
        """Return every record whose name starts with a prefix.

        Args:
            prefix: Name prefix, e.g. ``/prod/api/``.

        Returns:
            Matching records.

        Raises:
            StoreError: If the store cannot be read.
        """

    @abstractmethod
    def delete_many(self, configs: list[ConfigInput]) -> None:
        """Remove records by name.

        Deleting a name that is not stored is a no-op.

        Args:
            configs: Entries whose names are removed.

        Raises:
            StoreError: If the deletion fails.
        """

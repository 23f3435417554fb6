"""Listing and ordering of stored configs."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from safectl.models.config import Config, ConfigInput

if TYPE_CHECKING:
    from safectl.stores.base import Store

_EPOCH = datetime.min.replace(tzinfo=UTC)


class SortKey(str, Enum):
    """Available orderings for listed configs."""

    NAME = "name"
    VERSION = "version"
    MODIFIED = "modified"


def _version_key(config: Config) -> tuple[int, int, str]:
    # Versions compare as integers so that "2" sorts before "10"
    if config.version.isdigit():
        return (0, int(config.version), config.name)
    return (1, 0, config.version)


def _modified_key(config: Config) -> tuple[datetime, str]:
    modified = config.modified
    if modified is None:
        return (_EPOCH, config.name)
    if modified.tzinfo is None:
        modified = modified.replace(tzinfo=UTC)
    return (modified, config.name)


def sort_configs(configs: Iterable[Config], key: SortKey = SortKey.NAME) -> list[Config]:
    """Return configs ordered by name, numeric version or modified time.

    Args:
        configs: Configs to order.
        key: Ordering to apply. Ties are broken by name.

    Returns:
        New sorted list.
    """
    if key == SortKey.VERSION:
        return sorted(configs, key=_version_key)
    if key == SortKey.MODIFIED:
        return sorted(configs, key=_modified_key)
    return sorted(configs, key=lambda c: c.name)


def list_configs(
    store: Store,
    inputs: Iterable[ConfigInput],
    key: SortKey = SortKey.NAME,
) -> list[Config]:
    """Read the stored records of ``inputs`` and order them.

    Names that are not stored are left out; an empty result is valid.

    Raises:
        StoreError: If the store cannot be read.
    """
    return sort_configs(store.get_many(list(inputs)), key)

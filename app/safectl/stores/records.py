"""Record collection helpers for file-backed stores.

File-backed stores keep the whole record set in one serialized JSON
list. Every operation reads the full collection, applies a pure
mutation from this module and writes the full collection back. The
read-modify-write cycle runs inside ``locked()``, which holds an
exclusive lock on a sidecar lock file, so overlapping invocations
against the same path cannot drop each other's writes.
"""

from __future__ import annotations

import fcntl
import json
import os
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from tempfile import NamedTemporaryFile

from safectl.errors import CorruptStateError, StoreError
from safectl.models.config import Config, ConfigInput, config_type

LOCK_SUFFIX = ".lock"


@contextmanager
def locked(path: Path) -> Iterator[None]:
    """Hold an exclusive lock for the collection stored at ``path``.

    Args:
        path: Path of the collection file.

    Raises:
        StoreError: If the lock file cannot be opened.
    """
    lock_path = path.with_name(path.name + LOCK_SUFFIX)
    try:
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o600)
    except OSError as e:
        raise StoreError(f"Cannot open lock file {lock_path}: {e}") from e
    try:
        fcntl.flock(fd, fcntl.LOCK_EX)
        yield
    finally:
        fcntl.flock(fd, fcntl.LOCK_UN)
        os.close(fd)


def loads_records(data: bytes, source: str) -> list[Config]:
    """Parse a serialized record collection.

    Args:
        data: JSON bytes.
        source: Human-readable origin for error messages.

    Returns:
        Parsed records. Empty or whitespace-only data is an empty collection.

    Raises:
        CorruptStateError: If the data is not a valid record list.
    """
    if not data.strip():
        return []
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CorruptStateError(f"Failed to parse data in {source}: {e}") from e

    if not isinstance(raw, list):
        raise CorruptStateError(f"Failed to parse data in {source}: expected a list of records")

    configs: list[Config] = []
    for index, record in enumerate(raw):
        if not isinstance(record, dict):
            raise CorruptStateError(f"Invalid record #{index} in {source}: not an object")
        try:
            configs.append(Config.from_record(record))
        except (KeyError, ValueError) as e:
            raise CorruptStateError(f"Invalid record #{index} in {source}: {e}") from e
    return configs


def dumps_records(configs: Iterable[Config]) -> bytes:
    """Serialize a record collection as indented JSON."""
    return json.dumps([c.to_record() for c in configs], indent="\t").encode("utf-8")


def write_atomic(path: Path, data: bytes) -> None:
    """Write bytes to ``path`` via a temporary file and ``os.replace``.

    Raises:
        StoreError: If the file cannot be written.
    """
    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, 0o600)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise StoreError(f"Failed to write {path}: {e}") from e


def apply_put(
    existing: list[Config],
    inputs: Iterable[ConfigInput],
    now: datetime | None = None,
) -> list[Config]:
    """Upsert inputs into a record collection.

    Existing names keep their position and creation time, get the new
    value, type and modified time, and their version incremented by one.
    New names are appended at version "1". When a name appears more than
    once in ``inputs`` the last occurrence wins and the version moves by
    one only.

    Args:
        existing: Current collection.
        inputs: Entries to write.
        now: Write timestamp. Defaults to the current UTC time.

    Returns:
        New collection.
    """
    timestamp = now or datetime.now(UTC)
    updates: dict[str, ConfigInput] = {c.name: c for c in inputs}

    result: list[Config] = []
    for record in existing:
        update = updates.pop(record.name, None)
        if update is None:
            result.append(record)
            continue
        result.append(
            Config(
                name=record.name,
                value=update.value,
                version=str(record.version_number + 1),
                type=config_type(update.secret),
                created=record.created or timestamp,
                modified=timestamp,
                data_type=record.data_type,
            )
        )

    for update in updates.values():
        result.append(
            Config(
                name=update.name,
                value=update.value,
                version="1",
                type=config_type(update.secret),
                created=timestamp,
                modified=timestamp,
            )
        )

    return result


def apply_delete(existing: list[Config], inputs: Iterable[ConfigInput]) -> list[Config]:
    """Remove the named records from a collection; unknown names are ignored."""
    names = {c.name for c in inputs}
    return [record for record in existing if record.name not in names]


def select_names(existing: list[Config], inputs: Iterable[ConfigInput]) -> list[Config]:
    """Return the stored records for the requested names, in request order."""
    by_name = {record.name: record for record in existing}
    result: list[Config] = []
    seen: set[str] = set()
    for config in inputs:
        record = by_name.get(config.name)
        if record is not None and config.name not in seen:
            seen.add(config.name)
            result.append(record)
    return result


def select_prefix(existing: list[Config], prefix: str) -> list[Config]:
    """Return the records whose names start with ``prefix``."""
    return [record for record in existing if record.name.startswith(prefix)]

"""Config models shared by every store backend.

ConfigInput is the desired state of a single entry as declared in the
project file. Config is the persisted state of the same entry as owned
by a store.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

# Storage types, fixed mapping from ConfigInput.secret
STRING_TYPE = "String"
SECURE_STRING_TYPE = "SecureString"

ConfigType = Literal["String", "SecureString"]

# Field names of the persisted record layout, in write order
RECORD_FIELDS = ("Name", "Value", "Modified", "Created", "Version", "Type", "DataType")

# Sub-microsecond digits written by other tools are truncated on read
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def config_type(secret: bool) -> ConfigType:
    """Map the secret flag to the storage type of a record."""
    return SECURE_STRING_TYPE if secret else STRING_TYPE


def key_of(name: str) -> str:
    """Return the last ``/``-delimited segment of a name."""
    return name.split("/")[-1]


def path_of(name: str) -> str:
    """Return every segment of a name except the last, joined by ``/``."""
    return "/".join(name.split("/")[:-1])


@dataclass(frozen=True, slots=True)
class ConfigInput:
    """Desired state of one configuration entry.

    Attributes:
        name: Full hierarchical name, e.g. ``/prod/api/DB_PASSWORD``.
        value: Desired value. Empty means the value must be supplied.
        secret: Whether the entry is stored as a SecureString.
        description: Human-readable description used as prompt hint.
    """

    name: str
    value: str = ""
    secret: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        """Validate input data after initialization."""
        if not self.name:
            msg = "Config name cannot be empty"
            raise ValueError(msg)

    @property
    def type(self) -> ConfigType:
        """Storage type derived from the secret flag."""
        return config_type(self.secret)

    def key(self) -> str:
        """Short name: the last segment of the full name."""
        return key_of(self.name)


@dataclass(frozen=True, slots=True)
class Config:
    """Persisted state of one configuration entry.

    Attributes:
        name: Full hierarchical name, unique within a store.
        value: Stored value.
        version: Decimal version string, starts at "1".
        type: "String" or "SecureString".
        created: Timestamp of the first write.
        modified: Timestamp of the latest write.
        data_type: Backend specific data type, if any.
    """

    name: str
    value: str
    version: str = "1"
    type: ConfigType = STRING_TYPE
    created: datetime | None = field(default=None)
    modified: datetime | None = field(default=None)
    data_type: str = ""

    def key(self) -> str:
        """Short name: the last segment of the full name."""
        return key_of(self.name)

    def path(self) -> str:
        """Every segment of the name except the last."""
        return path_of(self.name)

    @property
    def version_number(self) -> int:
        """Version as an integer, for ordering and increments."""
        return int(self.version)

    def to_record(self) -> dict[str, Any]:
        """Convert to the persisted record layout.

        Returns:
            Dictionary keyed by the field names in RECORD_FIELDS.
        """
        return {
            "Name": self.name,
            "Value": self.value,
            "Modified": _format_time(self.modified),
            "Created": _format_time(self.created),
            "Version": self.version,
            "Type": self.type,
            "DataType": self.data_type,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Config:
        """Create a Config from a persisted record.

        Args:
            record: Dictionary in the persisted record layout.

        Returns:
            Config instance.

        Raises:
            KeyError: If Name or Value is missing.
            ValueError: If a field has the wrong type or format.
        """
        name = record["Name"]
        value = record["Value"]
        version = record.get("Version", "1")
        record_type = record.get("Type", STRING_TYPE)

        if not isinstance(name, str) or not name:
            msg = f"invalid Name: {name!r}"
            raise ValueError(msg)
        if not isinstance(value, str):
            msg = f"invalid Value for {name}"
            raise ValueError(msg)
        if not isinstance(version, str) or not version.isdigit():
            msg = f"invalid Version for {name}: {version!r}"
            raise ValueError(msg)
        if record_type not in (STRING_TYPE, SECURE_STRING_TYPE):
            msg = f"invalid Type for {name}: {record_type!r}"
            raise ValueError(msg)

        return cls(
            name=name,
            value=value,
            version=version,
            type=record_type,
            created=_parse_time(record.get("Created")),
            modified=_parse_time(record.get("Modified")),
            data_type=record.get("DataType") or "",
        )


def _format_time(value: datetime | None) -> str | None:
    """Format a timestamp as RFC 3339, or None."""
    if value is None:
        return None
    return value.isoformat()


def _parse_time(value: object) -> datetime | None:
    """Parse an RFC 3339 timestamp.

    Accepts fractional seconds of any precision and a trailing ``Z``.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        msg = f"invalid timestamp: {value!r}"
        raise ValueError(msg)
    return datetime.fromisoformat(_FRACTION_RE.sub(r"\1", value))

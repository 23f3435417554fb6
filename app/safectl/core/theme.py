"""Console palette for safectl.

The palette is read from ``~/.config/safectl/theme.toml`` when present:

    [colors]
    secure = "#ff00aa"
    added = "#00ff00"

Missing keys keep their defaults. An unreadable or invalid file is
reported once and ignored.
"""

import logging
import tomllib
from functools import cache
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError
from rich.theme import Theme

from safectl.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

HexColor = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=r"^#[0-9a-fA-F]{6}$"),
]


class ThemeColors(BaseModel):
    """Colors of the safectl console, as ``#RRGGBB``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"
    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"
    # Plan and listing markers
    added: HexColor = "#c1ff62"
    removed: HexColor = "#f53263"
    changed: HexColor = "#0e8ac8"
    secure: HexColor = "#d44ebc"
    name: HexColor = "#ffffff"


class ThemeFile(BaseModel):
    """Layout of the user theme file. Other tables are ignored."""

    model_config = ConfigDict(extra="ignore")

    colors: ThemeColors = Field(default_factory=ThemeColors)


def load_theme(path: Path | None = None) -> ThemeColors:
    """Read the palette from ``path``, falling back to the defaults."""
    path = path or get_user_theme_path()
    try:
        with open(path, "rb") as f:
            return ThemeFile.model_validate(tomllib.load(f)).colors
    except FileNotFoundError:
        return ThemeColors()
    except (OSError, tomllib.TOMLDecodeError, ValidationError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return ThemeColors()


def build_theme(colors: ThemeColors) -> Theme:
    """Map the palette onto the style names used in markup and tables."""
    return Theme(
        {
            "muted": colors.muted,
            "border": colors.border,
            "bold_header": f"bold {colors.header}",
            "success": colors.success,
            "warning": colors.warning,
            "error": f"bold {colors.error}",
            "info": colors.info,
            "added": colors.added,
            "removed": colors.removed,
            "changed": colors.changed,
            "secure": colors.secure,
            "config.name": f"bold {colors.name}",
            "config.version": colors.muted,
        }
    )


@cache
def get_theme() -> Theme:
    """Return the Rich theme of the shared consoles."""
    return build_theme(load_theme())

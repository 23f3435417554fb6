"""Unit tests for the console palette."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError
from safectl.core.theme import ThemeColors, ThemeFile, build_theme, load_theme


class TestThemeColors:
    """Tests for color validation."""

    @pytest.mark.parametrize("value", ["#a0b1c2", "#A0B1C2"])
    def test_valid_colors(self, value: str) -> None:
        """Six digit hex colors are accepted."""
        assert ThemeColors(secure=value).secure == value

    @pytest.mark.parametrize("value", ["ffffff", "#fff", "#gggggg", "red"])
    def test_invalid_colors(self, value: str) -> None:
        """Anything but #RRGGBB is rejected."""
        with pytest.raises(ValidationError):
            ThemeColors(secure=value)

    def test_unknown_color_rejected(self) -> None:
        """Unknown color names are rejected."""
        with pytest.raises(ValidationError):
            ThemeColors.model_validate({"text": "#ffffff"})


class TestThemeFile:
    """Tests for the theme file layout."""

    def test_colors_table_optional(self) -> None:
        """A file without [colors] yields the defaults."""
        assert ThemeFile.model_validate({"other": {"a": 1}}).colors == ThemeColors()

    def test_partial_override(self) -> None:
        """Only the given colors change."""
        colors = ThemeFile.model_validate({"colors": {"added": "#00ff00"}}).colors

        assert colors.added == "#00ff00"
        assert colors.removed == ThemeColors().removed


class TestLoadTheme:
    """Tests for load_theme."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """Without a user file the defaults are used."""
        assert load_theme(tmp_path / "missing.toml") == ThemeColors()

    def test_user_overrides(self, tmp_path: Path) -> None:
        """User colors override defaults."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\nsecure = "#00ff00"\n')

        colors = load_theme(theme_file)

        assert colors.secure == "#00ff00"
        assert colors.header == ThemeColors().header

    @pytest.mark.parametrize(
        "content",
        ["invalid toml [[[", '[colors]\nsecure = "red"\n', 'colors = "#fff"\n'],
    )
    def test_bad_file_falls_back(
        self, tmp_path: Path, content: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Malformed files are logged and the defaults are used."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text(content)

        with caplog.at_level(logging.WARNING, logger="safectl"):
            assert load_theme(theme_file) == ThemeColors()

        assert "Ignoring theme file" in caplog.text


class TestBuildTheme:
    """Tests for build_theme."""

    def test_defines_used_styles(self) -> None:
        """Every style used in markup and tables is defined."""
        theme = build_theme(ThemeColors())

        for name in (
            "secure",
            "added",
            "removed",
            "changed",
            "bold_header",
            "border",
            "config.name",
            "config.version",
        ):
            assert name in theme.styles

    def test_style_follows_color(self) -> None:
        """A changed color reaches the derived style."""
        theme = build_theme(ThemeColors(secure="#00ff00"))

        assert theme.styles["secure"].color is not None
        assert theme.styles["secure"].color.triplet is not None
        assert theme.styles["secure"].color.triplet.hex == "#00ff00"

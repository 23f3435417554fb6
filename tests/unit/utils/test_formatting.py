"""Unit tests for console formatting helpers."""

from datetime import UTC, datetime

from safectl.utils.formatting import create_config_table, format_time, format_type


class TestFormatting:
    """Tests for table and value formatting."""

    def test_config_table_columns(self) -> None:
        """The config table has the listing columns in order."""
        table = create_config_table()

        assert [c.header for c in table.columns] == [
            "Name",
            "Value",
            "Type",
            "Version",
            "LastModified",
        ]

    def test_format_time_unknown(self) -> None:
        """Unknown timestamps render as a dash."""
        assert format_time(None) == "-"

    def test_format_time(self) -> None:
        """Timestamps render without fractional seconds."""
        value = format_time(datetime(2024, 5, 1, 12, 0, 0, 123, tzinfo=UTC))

        assert len(value) == len("2024-05-01 12:00:00")

    def test_format_type(self) -> None:
        """Secure strings are highlighted."""
        assert format_type("SecureString") == "[secure]SecureString[/]"
        assert format_type("String") == "String"

"""Unit tests for interactive secret prompting."""

from unittest.mock import MagicMock, patch

import pytest
import typer
from safectl.cli.prompt import CliPrompter
from safectl.errors import PromptAbortedError


def _not_empty(value: str) -> str | None:
    return None if value else "value must not be empty"


class TestCliPrompter:
    """Tests for CliPrompter."""

    @patch("safectl.cli.prompt.typer.prompt")
    def test_returns_answer(self, mock_prompt: MagicMock) -> None:
        """A valid answer is returned."""
        mock_prompt.return_value = "s3cret"

        assert CliPrompter().ask("TOKEN", "", _not_empty) == "s3cret"
        assert mock_prompt.call_args.kwargs["default"] is None

    @patch("safectl.cli.prompt.typer.prompt")
    def test_repeats_until_valid(self, mock_prompt: MagicMock) -> None:
        """Invalid answers are rejected and asked again."""
        mock_prompt.side_effect = ["", "ok"]

        assert CliPrompter().ask("TOKEN", "", _not_empty) == "ok"
        assert mock_prompt.call_count == 2

    @patch("safectl.cli.prompt.typer.prompt")
    def test_default_offered(self, mock_prompt: MagicMock) -> None:
        """The stored value is offered as default unless input is hidden."""
        mock_prompt.return_value = "old"

        CliPrompter().ask("TOKEN", "old", _not_empty)
        assert mock_prompt.call_args.kwargs["default"] == "old"
        assert mock_prompt.call_args.kwargs["show_default"] is True

        CliPrompter(hide_input=True).ask("TOKEN", "old", _not_empty)
        assert mock_prompt.call_args.kwargs["hide_input"] is True
        assert mock_prompt.call_args.kwargs["show_default"] is False

    @patch("safectl.cli.prompt.typer.prompt")
    def test_abort(self, mock_prompt: MagicMock) -> None:
        """Ctrl-C is reported as PromptAbortedError."""
        mock_prompt.side_effect = typer.Abort()

        with pytest.raises(PromptAbortedError):
            CliPrompter().ask("TOKEN", "", _not_empty)

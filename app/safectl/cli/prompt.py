"""Interactive prompting for secret values."""

import typer

from safectl.core.deploy import Validator
from safectl.errors import PromptAbortedError
from safectl.utils.formatting import print_error


class CliPrompter:
    """Prompter reading values from the terminal.

    The prompt repeats until the value passes validation. Ctrl-C or end
    of input aborts the deploy.
    """

    def __init__(self, hide_input: bool = False) -> None:
        self._hide_input = hide_input

    def ask(self, label: str, default: str, validate: Validator) -> str:
        while True:
            try:
                value: str = typer.prompt(
                    label,
                    default=default or None,
                    hide_input=self._hide_input,
                    show_default=not self._hide_input,
                )
            except typer.Abort as e:
                raise PromptAbortedError(f"prompt for {label} aborted") from e

            error = validate(value)
            if error is None:
                return value
            print_error(error)

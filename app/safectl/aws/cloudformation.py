"""CloudFormation stack output lookup.

Stack outputs can be referenced from values in the project file.
"""

import logging
from typing import Any

from botocore.exceptions import ClientError

from safectl.aws.session import create_client, error_code
from safectl.errors import NotFoundError, StoreError

logger = logging.getLogger(__name__)


class StackOutputs:
    """Reads the outputs of CloudFormation stacks."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def for_region(cls, region: str | None) -> "StackOutputs":
        """Create a reader with a cloudformation client for ``region``."""
        return cls(create_client("cloudformation", region))

    def get_output(self, stack_name: str) -> dict[str, str]:
        """Return the outputs of one stack.

        Raises:
            NotFoundError: If the stack does not exist.
            StoreError: If the stack cannot be described.
        """
        try:
            response = self._client.describe_stacks(StackName=stack_name)
        except ClientError as e:
            if error_code(e) == "ValidationError" and "does not exist" in str(e):
                raise NotFoundError(f"{stack_name} stack does not exist") from e
            raise StoreError(f"Failed to describe stack {stack_name}: {e}") from e

        stacks = response.get("Stacks", [])
        if not stacks:
            raise NotFoundError(f"{stack_name} stack does not exist")

        return {
            output["OutputKey"]: output["OutputValue"]
            for output in stacks[0].get("Outputs", [])
        }

    def get_outputs(self, stack_names: list[str]) -> dict[str, str]:
        """Merge the outputs of several stacks; later stacks win.

        Missing stacks are skipped with a warning.
        """
        result: dict[str, str] = {}
        for stack_name in stack_names:
            try:
                result.update(self.get_output(stack_name))
            except NotFoundError as e:
                logger.warning("Skipping stack outputs: %s", e)
        return result

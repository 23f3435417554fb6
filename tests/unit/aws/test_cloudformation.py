"""Unit tests for CloudFormation stack output lookup."""

from unittest.mock import MagicMock

import pytest
from helpers import client_error
from safectl.aws.cloudformation import StackOutputs
from safectl.errors import NotFoundError, StoreError


@pytest.fixture
def client() -> MagicMock:
    """Mock cloudformation client."""
    return MagicMock()


class TestStackOutputs:
    """Tests for StackOutputs."""

    def test_get_output(self, client: MagicMock) -> None:
        """Outputs are returned as a key/value mapping."""
        client.describe_stacks.return_value = {
            "Stacks": [
                {
                    "Outputs": [
                        {"OutputKey": "VpcId", "OutputValue": "vpc-1"},
                        {"OutputKey": "SubnetId", "OutputValue": "subnet-1"},
                    ]
                }
            ]
        }

        result = StackOutputs(client).get_output("network")

        client.describe_stacks.assert_called_once_with(StackName="network")
        assert result == {"VpcId": "vpc-1", "SubnetId": "subnet-1"}

    def test_missing_stack(self, client: MagicMock) -> None:
        """A stack that does not exist raises NotFoundError."""
        client.describe_stacks.side_effect = client_error(
            "ValidationError", "Stack with id network does not exist"
        )

        with pytest.raises(NotFoundError, match="network stack does not exist"):
            StackOutputs(client).get_output("network")

    def test_other_error(self, client: MagicMock) -> None:
        """Other failures raise StoreError."""
        client.describe_stacks.side_effect = client_error("AccessDenied")

        with pytest.raises(StoreError):
            StackOutputs(client).get_output("network")

    def test_get_outputs_skips_missing(self, client: MagicMock) -> None:
        """Missing stacks are skipped; later stacks win on conflicts."""
        client.describe_stacks.side_effect = [
            {"Stacks": [{"Outputs": [{"OutputKey": "A", "OutputValue": "1"}]}]},
            client_error("ValidationError", "Stack with id gone does not exist"),
            {"Stacks": [{"Outputs": [{"OutputKey": "A", "OutputValue": "2"}]}]},
        ]

        result = StackOutputs(client).get_outputs(["one", "gone", "three"])

        assert result == {"A": "2"}

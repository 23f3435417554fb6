"""Unit tests for boto3 client construction."""

from unittest.mock import MagicMock, patch

import pytest
from helpers import client_error
from safectl.aws.session import MAX_ATTEMPTS, RETRY_CONFIG, create_client, error_code
from safectl.errors import ConfigurationError


class TestCreateClient:
    """Tests for create_client function."""

    def test_requires_region(self) -> None:
        """An empty region is a configuration error."""
        with pytest.raises(ConfigurationError, match="region is required for ssm"):
            create_client("ssm", None)

    def test_requires_credentials(self) -> None:
        """Missing credentials are a configuration error."""
        session = MagicMock()
        session.get_credentials.return_value = None

        with (
            patch("safectl.aws.session.boto3.session.Session", return_value=session),
            pytest.raises(ConfigurationError, match="credentials"),
        ):
            create_client("ssm", "eu-west-1")

    def test_client_uses_retry_config(self) -> None:
        """Clients are created with the standard retry policy."""
        session = MagicMock()

        with patch(
            "safectl.aws.session.boto3.session.Session", return_value=session
        ) as session_cls:
            client = create_client("ssm", "eu-west-1", profile="ops")

        session_cls.assert_called_once_with(region_name="eu-west-1", profile_name="ops")
        session.client.assert_called_once_with("ssm", config=RETRY_CONFIG)
        assert client is session.client.return_value
        assert RETRY_CONFIG.retries == {"max_attempts": MAX_ATTEMPTS, "mode": "standard"}


class TestErrorCode:
    """Tests for error_code function."""

    def test_client_error(self) -> None:
        """The AWS error code is extracted from ClientError."""
        assert error_code(client_error("ThrottlingException")) == "ThrottlingException"

    def test_other_error(self) -> None:
        """Other exceptions have no code."""
        assert error_code(ValueError("x")) == ""

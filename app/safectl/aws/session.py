"""boto3 session and client construction.

Retry and throttling behaviour is delegated to botocore: every client is
created with the standard retry mode and a fixed attempt budget.
"""

from typing import Any

import boto3
from botocore.config import Config as BotoConfig

from safectl.errors import ConfigurationError

MAX_ATTEMPTS = 10

RETRY_CONFIG = BotoConfig(retries={"max_attempts": MAX_ATTEMPTS, "mode": "standard"})


def create_client(service: str, region: str | None, profile: str | None = None) -> Any:
    """Create a boto3 client for an AWS service.

    Args:
        service: boto3 service name, e.g. "ssm".
        region: AWS region.
        profile: Optional named profile from the shared credentials file.

    Returns:
        boto3 client configured with the retry policy.

    Raises:
        ConfigurationError: If region is empty or no credentials are found.
    """
    if not region:
        raise ConfigurationError(f"invalid parameter: region is required for {service}")

    session = boto3.session.Session(region_name=region, profile_name=profile)
    if session.get_credentials() is None:
        raise ConfigurationError("no AWS credentials found")

    return session.client(service, config=RETRY_CONFIG)


def error_code(error: Exception) -> str:
    """Return the AWS error code of a botocore ClientError, or ""."""
    response = getattr(error, "response", None) or {}
    return str(response.get("Error", {}).get("Code", ""))

"""AWS Systems Manager Parameter Store backend.

Parameters are hierarchical and versioned by the service itself: every
``put_parameter`` with ``Overwrite`` bumps the version by one.
"""

import logging
from collections.abc import Iterator
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from safectl.aws.session import create_client
from safectl.errors import StoreError
from safectl.models.config import SECURE_STRING_TYPE, STRING_TYPE, Config, ConfigInput
from safectl.stores.base import Store

logger = logging.getLogger(__name__)

# Service limit for GetParameters and DeleteParameters
BATCH_SIZE = 10


def _chunks(names: list[str], size: int = BATCH_SIZE) -> Iterator[list[str]]:
    for i in range(0, len(names), size):
        yield names[i : i + size]


def _unique_names(configs: list[ConfigInput]) -> list[str]:
    return list(dict.fromkeys(c.name for c in configs))


def _to_config(parameter: dict[str, Any]) -> Config:
    """Convert a Parameter response object to a Config."""
    parameter_type = parameter.get("Type", STRING_TYPE)
    return Config(
        name=parameter["Name"],
        value=parameter.get("Value", ""),
        version=str(parameter.get("Version", 1)),
        type=SECURE_STRING_TYPE if parameter_type == SECURE_STRING_TYPE else STRING_TYPE,
        modified=parameter.get("LastModifiedDate"),
        data_type=parameter.get("DataType", ""),
    )


class SsmStore(Store):
    """Store backed by SSM Parameter Store.

    Batches are written one parameter at a time; the service offers no
    multi-parameter transaction, so a failing batch can be partially
    applied. The error names the parameter that failed.
    """

    def __init__(self, client: Any) -> None:
        """Initialize the store.

        Args:
            client: boto3 ``ssm`` client.
        """
        self._client = client

    @classmethod
    def for_region(cls, region: str | None) -> "SsmStore":
        """Create a store with an ``ssm`` client for ``region``.

        Raises:
            ConfigurationError: If region or credentials are missing.
        """
        return cls(create_client("ssm", region))

    def put_many(self, configs: list[ConfigInput]) -> None:
        for config in configs:
            request: dict[str, Any] = {
                "Name": config.name,
                "Value": config.value,
                "Type": config.type,
                "Overwrite": True,
            }
            if config.description:
                request["Description"] = config.description
            try:
                self._client.put_parameter(**request)
            except (ClientError, BotoCoreError) as e:
                raise StoreError(f"Failed to put parameter {config.name}: {e}") from e
            logger.debug("Put parameter %s", config.name)

    def get_many(self, configs: list[ConfigInput]) -> list[Config]:
        names = _unique_names(configs)
        found: dict[str, Config] = {}
        for chunk in _chunks(names):
            try:
                response = self._client.get_parameters(Names=chunk, WithDecryption=True)
            except (ClientError, BotoCoreError) as e:
                raise StoreError(f"Failed to get parameters: {e}") from e
            for parameter in response.get("Parameters", []):
                found[parameter["Name"]] = _to_config(parameter)
        return [found[name] for name in names if name in found]

    def get_by_path(self, prefix: str) -> list[Config]:
        path = prefix.rstrip("/") or "/"
        paginator = self._client.get_paginator("get_parameters_by_path")
        result: list[Config] = []
        try:
            for page in paginator.paginate(Path=path, Recursive=True, WithDecryption=True):
                for parameter in page.get("Parameters", []):
                    if parameter["Name"].startswith(prefix):
                        result.append(_to_config(parameter))
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to get parameters by path {path}: {e}") from e
        return result

    def delete_many(self, configs: list[ConfigInput]) -> None:
        for chunk in _chunks(_unique_names(configs)):
            try:
                response = self._client.delete_parameters(Names=chunk)
            except (ClientError, BotoCoreError) as e:
                raise StoreError(f"Failed to delete parameters: {e}") from e
            missing = response.get("InvalidParameters", [])
            if missing:
                logger.debug("Parameters already absent: %s", ", ".join(missing))

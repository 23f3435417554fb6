"""AWS Secrets Manager backend.

Secrets are flat name/value pairs. Secrets Manager identifies versions
with opaque ids, so the monotonic version number and the storage type
are kept in resource tags on each secret.
"""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from safectl.aws.session import create_client, error_code
from safectl.errors import StoreError
from safectl.models.config import SECURE_STRING_TYPE, STRING_TYPE, Config, ConfigInput
from safectl.stores.base import Store

logger = logging.getLogger(__name__)

VERSION_TAG = "safectl:version"
TYPE_TAG = "safectl:type"

NOT_FOUND = "ResourceNotFoundException"


def _tags(description: dict[str, Any]) -> dict[str, str]:
    return {t["Key"]: t["Value"] for t in description.get("Tags", [])}


def _version_of(tags: dict[str, str]) -> int:
    version = tags.get(VERSION_TAG, "1")
    return int(version) if version.isdigit() else 1


class SecretsManagerStore(Store):
    """Store backed by AWS Secrets Manager.

    Like the parameter store, writes are issued per secret and a failing
    batch can be partially applied.
    """

    def __init__(self, client: Any) -> None:
        """Initialize the store.

        Args:
            client: boto3 ``secretsmanager`` client.
        """
        self._client = client

    @classmethod
    def for_region(cls, region: str | None) -> "SecretsManagerStore":
        """Create a store with a ``secretsmanager`` client for ``region``.

        Raises:
            ConfigurationError: If region or credentials are missing.
        """
        return cls(create_client("secretsmanager", region))

    def put_many(self, configs: list[ConfigInput]) -> None:
        for config in configs:
            try:
                self._put(config)
            except (ClientError, BotoCoreError) as e:
                raise StoreError(f"Failed to put secret {config.name}: {e}") from e
            logger.debug("Put secret %s", config.name)

    def _put(self, config: ConfigInput) -> None:
        description = self._describe(config.name)

        if description is None:
            request: dict[str, Any] = {
                "Name": config.name,
                "SecretString": config.value,
                "Tags": [
                    {"Key": VERSION_TAG, "Value": "1"},
                    {"Key": TYPE_TAG, "Value": config.type},
                ],
            }
            if config.description:
                request["Description"] = config.description
            self._client.create_secret(**request)
            return

        if "DeletedDate" in description:
            self._client.restore_secret(SecretId=config.name)

        version = _version_of(_tags(description)) + 1
        self._client.put_secret_value(SecretId=config.name, SecretString=config.value)
        self._client.tag_resource(
            SecretId=config.name,
            Tags=[
                {"Key": VERSION_TAG, "Value": str(version)},
                {"Key": TYPE_TAG, "Value": config.type},
            ],
        )

    def get_many(self, configs: list[ConfigInput]) -> list[Config]:
        result: list[Config] = []
        for name in dict.fromkeys(c.name for c in configs):
            try:
                description = self._describe(name)
                if description is None or "DeletedDate" in description:
                    continue
                result.append(self._to_config(description))
            except (ClientError, BotoCoreError) as e:
                raise StoreError(f"Failed to get secret {name}: {e}") from e
        return result

    def get_by_path(self, prefix: str) -> list[Config]:
        paginator = self._client.get_paginator("list_secrets")
        result: list[Config] = []
        try:
            for page in paginator.paginate(Filters=[{"Key": "name", "Values": [prefix]}]):
                for entry in page.get("SecretList", []):
                    if "DeletedDate" in entry or not entry["Name"].startswith(prefix):
                        continue
                    result.append(self._to_config(entry))
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to list secrets under {prefix}: {e}") from e
        return result

    def delete_many(self, configs: list[ConfigInput]) -> None:
        for name in dict.fromkeys(c.name for c in configs):
            try:
                self._client.delete_secret(SecretId=name, ForceDeleteWithoutRecovery=True)
            except ClientError as e:
                if error_code(e) == NOT_FOUND:
                    continue
                raise StoreError(f"Failed to delete secret {name}: {e}") from e
            except BotoCoreError as e:
                raise StoreError(f"Failed to delete secret {name}: {e}") from e

    def _describe(self, name: str) -> dict[str, Any] | None:
        """Describe a secret, or None if it does not exist."""
        try:
            return self._client.describe_secret(SecretId=name)
        except ClientError as e:
            if error_code(e) == NOT_FOUND:
                return None
            raise

    def _to_config(self, description: dict[str, Any]) -> Config:
        """Fetch the current value and build a Config from a secret description."""
        name = description["Name"]
        value = self._client.get_secret_value(SecretId=name)
        tags = _tags(description)
        secret_type = tags.get(TYPE_TAG, SECURE_STRING_TYPE)
        return Config(
            name=name,
            value=value.get("SecretString", ""),
            version=str(_version_of(tags)),
            type=STRING_TYPE if secret_type == STRING_TYPE else SECURE_STRING_TYPE,
            created=description.get("CreatedDate"),
            modified=description.get("LastChangedDate"),
        )

"""Test doubles shared by the unit tests."""

from typing import Any

from botocore.exceptions import ClientError
from safectl.models.config import Config, ConfigInput
from safectl.stores.base import Store


class MemoryStore(Store):
    """In-memory store recording every call."""

    def __init__(self, records: list[Config] | None = None) -> None:
        self.records: dict[str, Config] = {r.name: r for r in records or []}
        self.put_calls: list[list[ConfigInput]] = []
        self.delete_calls: list[list[ConfigInput]] = []
        self.fail_put: Exception | None = None
        self.fail_get: Exception | None = None
        self.fail_get_by_path: Exception | None = None
        self.fail_delete: Exception | None = None

    def put_many(self, configs: list[ConfigInput]) -> None:
        self.put_calls.append(list(configs))
        if self.fail_put is not None:
            raise self.fail_put
        for config in configs:
            existing = self.records.get(config.name)
            version = str(existing.version_number + 1) if existing else "1"
            self.records[config.name] = Config(
                name=config.name,
                value=config.value,
                version=version,
                type=config.type,
            )

    def get_many(self, configs: list[ConfigInput]) -> list[Config]:
        if self.fail_get is not None:
            raise self.fail_get
        return [self.records[c.name] for c in configs if c.name in self.records]

    def get_by_path(self, prefix: str) -> list[Config]:
        if self.fail_get_by_path is not None:
            raise self.fail_get_by_path
        return [r for name, r in self.records.items() if name.startswith(prefix)]

    def delete_many(self, configs: list[ConfigInput]) -> None:
        self.delete_calls.append(list(configs))
        if self.fail_delete is not None:
            raise self.fail_delete
        for config in configs:
            self.records.pop(config.name, None)


class ScriptedPrompter:
    """Prompter returning prepared answers and recording each question."""

    def __init__(self, answers: dict[str, str] | None = None) -> None:
        self.answers = answers or {}
        self.asked: list[tuple[str, str]] = []

    def ask(self, label: str, default: str, validate: Any) -> str:
        self.asked.append((label, default))
        for key, value in self.answers.items():
            if label == key or label.startswith(f"{key} "):
                return value
        return default


def client_error(code: str, message: str = "error", operation: str = "Operation") -> ClientError:
    """Build a botocore ClientError with the given error code."""
    response: Any = {"Error": {"Code": code, "Message": message}}
    return ClientError(response, operation)

"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from helpers import MemoryStore
from safectl.stores.local import LocalStore


@pytest.fixture
def memory_store() -> MemoryStore:
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def local_store(tmp_path: Path) -> LocalStore:
    """Local store writing into a temporary directory."""
    return LocalStore(directory=tmp_path / "store", stage="dev")


@pytest.fixture
def project_file(tmp_path: Path) -> Path:
    """A project file using a local store inside the temporary directory."""
    path = tmp_path / "safectl.toml"
    store_dir = tmp_path / "store"
    path.write_text(
        f"""service = "api"
provider = "local"
filepath = "{store_dir}"

[config.defaults]
LOG_LEVEL = "info"
DB_HOST = "db.{{{{stage}}}}.internal"

[config.prod]
LOG_LEVEL = "warning"

[config.shared]
DOMAIN = "example.com"

[secret.defaults]
DB_PASSWORD = "Database password"
"""
    )
    return path

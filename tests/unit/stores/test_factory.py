"""Unit tests for the store factory."""

import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from safectl.errors import ConfigurationError
from safectl.models.config import ConfigInput
from safectl.models.project import Provider, ResolvedProject
from safectl.stores.factory import StoreSettings, get_store, parse_provider
from safectl.stores.local import LocalStore
from safectl.stores.secrets_manager import SecretsManagerStore
from safectl.stores.ssm import SsmStore


class TestParseProvider:
    """Tests for parse_provider function."""

    def test_known_provider(self) -> None:
        """Known identifiers map to Provider values."""
        assert parse_provider("secrets-manager") == Provider.SECRETS_MANAGER

    def test_unknown_provider(self) -> None:
        """Unknown identifiers raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="invalid provider `vault`"):
            parse_provider("vault")


class TestGetStore:
    """Tests for get_store function."""

    def test_local_store(self, tmp_path: Path) -> None:
        """The local provider uses filepath and stage."""
        store = get_store(StoreSettings(provider="local", filepath=str(tmp_path), stage="qa"))

        assert isinstance(store, LocalStore)
        assert store.path == tmp_path / "qa-safectl.json"

    def test_local_store_default_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without filepath the local store lives in the state directory."""
        monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))

        store = get_store(StoreSettings(provider="local", stage="dev"))

        assert isinstance(store, LocalStore)
        assert store.path == tmp_path / "safectl" / "stores" / "dev-safectl.json"

    def test_unknown_provider_before_io(self, tmp_path: Path) -> None:
        """An unknown provider fails without touching the file system."""
        with pytest.raises(ConfigurationError):
            get_store(StoreSettings(provider="vault", filepath=str(tmp_path / "x")))

        assert not (tmp_path / "x").exists()

    def test_ssm_store(self) -> None:
        """The ssm provider builds a client for the region."""
        with patch("safectl.stores.ssm.create_client", return_value=MagicMock()) as create:
            store = get_store(StoreSettings(provider="ssm", region="eu-west-1"))

        assert isinstance(store, SsmStore)
        create.assert_called_once_with("ssm", "eu-west-1")

    def test_secrets_manager_store(self) -> None:
        """The secrets-manager provider builds a secretsmanager client."""
        with patch(
            "safectl.stores.secrets_manager.create_client", return_value=MagicMock()
        ) as create:
            store = get_store(StoreSettings(provider="secrets-manager", region="us-east-1"))

        assert isinstance(store, SecretsManagerStore)
        create.assert_called_once_with("secretsmanager", "us-east-1")

    def test_remote_store_requires_region(self) -> None:
        """Remote providers without region are configuration errors."""
        with pytest.raises(ConfigurationError, match="region"):
            get_store(StoreSettings(provider="ssm"))

    def test_relative_filepath_uses_base_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A relative filepath is anchored at base_dir, not the working directory."""
        project_dir = tmp_path / "project"
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        monkeypatch.chdir(elsewhere)

        store = get_store(
            StoreSettings(provider="local", filepath=".safectl", stage="dev", base_dir=project_dir)
        )

        assert isinstance(store, LocalStore)
        assert store.path == project_dir / ".safectl" / "dev-safectl.json"
        assert not (elsewhere / ".safectl").exists()

    def test_absolute_filepath_ignores_base_dir(self, tmp_path: Path) -> None:
        """An absolute filepath is used as given."""
        settings = StoreSettings(
            provider="local", filepath=str(tmp_path / "abs"), base_dir=tmp_path / "other"
        )

        assert settings.resolved_filepath() == tmp_path / "abs"

    def test_file_stores_do_not_load_aws_backends(self) -> None:
        """Building a local store leaves the AWS backends unimported."""
        code = (
            "import sys, tempfile\n"
            "from safectl.stores import StoreSettings, get_store\n"
            "get_store(StoreSettings(provider='local', filepath=tempfile.mkdtemp()))\n"
            "assert 'safectl.stores.ssm' not in sys.modules\n"
            "assert 'safectl.stores.secrets_manager' not in sys.modules\n"
            "assert 'boto3' not in sys.modules\n"
        )
        result = subprocess.run(
            [sys.executable, "-c", code],
            capture_output=True,
            text=True,
            env={**os.environ, "PYTHONPATH": os.pathsep.join(sys.path)},
            check=False,
        )

        assert result.returncode == 0, result.stderr

    def test_gpg_requires_filepath(self) -> None:
        """The gpg provider without filepath is a configuration error."""
        with pytest.raises(ConfigurationError, match="filepath"):
            get_store(StoreSettings(provider="gpg", gpg_recipients=("ops",)))


class TestStoreSettings:
    """Tests for StoreSettings.from_project."""

    def test_from_project(self) -> None:
        """Settings are taken from the resolved project."""
        project = ResolvedProject(
            service="api",
            stage="prod",
            provider=Provider.GPG,
            region=None,
            filepath="/srv/secrets.gpg",
            prefix="/prod/api/",
            gpg_recipients=("ops@example.com",),
            configs=(ConfigInput(name="/prod/api/A", value="1"),),
            secrets=(),
        )

        settings = StoreSettings.from_project(project)

        assert settings == StoreSettings(
            provider="gpg",
            filepath="/srv/secrets.gpg",
            stage="prod",
            gpg_recipients=("ops@example.com",),
        )

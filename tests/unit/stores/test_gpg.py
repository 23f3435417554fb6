"""Unit tests for the GPG-encrypted file store.

The gpg executable is mocked; encryption is modelled as identity.
"""

import subprocess
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from safectl.errors import ConfigurationError, CorruptStateError, StoreError
from safectl.models.config import Config, ConfigInput
from safectl.stores.gpg import GpgStore
from safectl.stores.records import dumps_records
from safectl.utils.shell import CommandResult


def _ok(stdout: bytes = b"") -> CommandResult:
    return CommandResult(stdout=stdout, stderr=b"", returncode=0)


@pytest.fixture
def gpg_available() -> Iterator[None]:
    """Pretend gpg is installed."""
    with patch("safectl.stores.gpg.command_exists", return_value=True):
        yield


@pytest.fixture
def fake_gpg() -> Iterator[MagicMock]:
    """Mock run_command so that encrypt and decrypt pass data through."""

    def run(args: list[str], *, input_data: bytes | None = None, **kwargs: object) -> CommandResult:
        if "--encrypt" in args:
            return _ok(input_data or b"")
        return _ok(Path(args[-1]).read_bytes())

    with patch("safectl.stores.gpg.run_command", side_effect=run) as mock_run:
        yield mock_run


class TestGpgStoreInit:
    """Tests for GpgStore construction."""

    def test_requires_recipient(self, tmp_path: Path, gpg_available: None) -> None:
        """At least one recipient is required."""
        with pytest.raises(ConfigurationError, match="recipient"):
            GpgStore(tmp_path / "secrets.gpg", [])

    def test_requires_gpg(self, tmp_path: Path) -> None:
        """A missing gpg executable is a configuration error."""
        with (
            patch("safectl.stores.gpg.command_exists", return_value=False),
            pytest.raises(ConfigurationError, match="not found"),
        ):
            GpgStore(tmp_path / "secrets.gpg", ["ops@example.com"])

    def test_missing_file_does_not_call_gpg(
        self, tmp_path: Path, gpg_available: None, fake_gpg: MagicMock
    ) -> None:
        """A new store does not decrypt anything."""
        GpgStore(tmp_path / "secrets.gpg", ["ops@example.com"])

        fake_gpg.assert_not_called()

    def test_decrypt_failure(self, tmp_path: Path, gpg_available: None) -> None:
        """A file that cannot be decrypted fails the constructor."""
        path = tmp_path / "secrets.gpg"
        path.write_bytes(b"ciphertext")
        failed = CommandResult(stdout=b"", stderr=b"no secret key", returncode=2)

        with (
            patch("safectl.stores.gpg.run_command", return_value=failed),
            pytest.raises(StoreError, match="no secret key"),
        ):
            GpgStore(path, ["ops@example.com"])

    def test_gpg_timeout(self, tmp_path: Path, gpg_available: None) -> None:
        """A hanging gpg process is reported as StoreError."""
        path = tmp_path / "secrets.gpg"
        path.write_bytes(b"ciphertext")

        with (
            patch(
                "safectl.stores.gpg.run_command",
                side_effect=subprocess.TimeoutExpired(cmd="gpg", timeout=60),
            ),
            pytest.raises(StoreError),
        ):
            GpgStore(path, ["ops@example.com"])

    def test_corrupt_content(self, tmp_path: Path, gpg_available: None) -> None:
        """Decrypted content that is not a record list is corrupt."""
        path = tmp_path / "secrets.gpg"
        path.write_bytes(b"ciphertext")

        with (
            patch("safectl.stores.gpg.run_command", return_value=_ok(b"not json")),
            pytest.raises(CorruptStateError),
        ):
            GpgStore(path, ["ops@example.com"])


class TestGpgStoreOperations:
    """Tests for GpgStore reads and writes."""

    def test_put_encrypts_to_recipients(
        self, tmp_path: Path, gpg_available: None, fake_gpg: MagicMock
    ) -> None:
        """Writes pass every recipient to gpg."""
        store = GpgStore(tmp_path / "secrets.gpg", ["a@example.com", "b@example.com"])

        store.put(ConfigInput(name="/dev/api/TOKEN", value="t", secret=True))

        args = fake_gpg.call_args_list[-1].args[0]
        assert args[:5] == ["gpg", "--batch", "--yes", "--quiet", "--encrypt"]
        assert args[5:] == [
            "--recipient",
            "a@example.com",
            "--recipient",
            "b@example.com",
        ]

    def test_round_trip_and_versioning(
        self, tmp_path: Path, gpg_available: None, fake_gpg: MagicMock
    ) -> None:
        """Values read back and versions move by one per write."""
        store = GpgStore(tmp_path / "secrets.gpg", ["ops@example.com"])

        store.put(ConfigInput(name="/dev/api/TOKEN", value="one"))
        store.put(ConfigInput(name="/dev/api/TOKEN", value="two"))

        config = store.get(ConfigInput(name="/dev/api/TOKEN"))
        assert config is not None
        assert config.value == "two"
        assert config.version == "2"

    def test_delete_and_prefix(
        self, tmp_path: Path, gpg_available: None, fake_gpg: MagicMock
    ) -> None:
        """Deleted names disappear from prefix listings."""
        path = tmp_path / "secrets.gpg"
        path.write_bytes(
            dumps_records(
                [Config(name="/dev/api/A", value="1"), Config(name="/dev/api/B", value="2")]
            )
        )
        store = GpgStore(path, ["ops@example.com"])

        store.delete_many([ConfigInput(name="/dev/api/A")])

        assert [c.name for c in store.get_by_path("/dev/api/")] == ["/dev/api/B"]

    def test_encrypt_failure(self, tmp_path: Path, gpg_available: None) -> None:
        """An encryption failure raises StoreError and writes nothing."""
        failed = CommandResult(stdout=b"", stderr=b"unusable public key", returncode=2)
        store = GpgStore(tmp_path / "secrets.gpg", ["ops@example.com"])

        with (
            patch("safectl.stores.gpg.run_command", return_value=failed),
            pytest.raises(StoreError, match="unusable public key"),
        ):
            store.put(ConfigInput(name="/a", value="1"))

        assert not (tmp_path / "secrets.gpg").exists()

"""Tests for the secret storage backends and the audit wrapper."""

import json
import stat

import pytest
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

from clawvault.errors import StorageError
from clawvault.storage import (
    AuditedStorage,
    AuditLog,
    FallbackStorage,
    KeyringStorage,
    MemoryStorage,
    Storage,
    create_storage,
)
from clawvault.storage import fallback as fallback_module
from clawvault.storage import keyring_provider

# ============================================================================
# Fixtures
# ============================================================================


class FakeKeyring:
    """Dict-backed stand-in for the ``keyring`` module functions."""

    def __init__(self):
        self.entries = {}
        self.fail_writes = False

    def set_password(self, service, name, value):
        if self.fail_writes:
            raise KeyringError("locked")
        self.entries[(service, name)] = value

    def get_password(self, service, name):
        return self.entries.get((service, name))

    def delete_password(self, service, name):
        if (service, name) not in self.entries:
            raise PasswordDeleteError("not found")
        del self.entries[(service, name)]


@pytest.fixture
def fake_keyring(monkeypatch):
    fake = FakeKeyring()
    for attr in ("set_password", "get_password", "delete_password"):
        monkeypatch.setattr(keyring_provider.keyring, attr, getattr(fake, attr))
    return fake


@pytest.fixture
def fast_kdf(monkeypatch):
    """Keep key derivation cheap in tests."""
    monkeypatch.setattr(fallback_module, "KDF_ITERATIONS", 1000)


# ============================================================================
# Test MemoryStorage
# ============================================================================


class TestMemoryStorage:
    def test_implements_protocol(self):
        assert isinstance(MemoryStorage(), Storage)

    def test_set_get_delete(self):
        storage = MemoryStorage()
        storage.set("A_KEY", "one")
        storage.set("A_KEY", "two")

        assert storage.get("A_KEY") == "two"
        assert storage.has("A_KEY")
        assert storage.list() == ["A_KEY"]

        storage.delete("A_KEY")
        storage.delete("A_KEY")
        assert storage.get("A_KEY") is None
        assert not storage.has("A_KEY")


# ============================================================================
# Test KeyringStorage
# ============================================================================


class TestKeyringStorage:
    """Test cases for KeyringStorage with a fake keyring."""

    def test_set_tracks_index(self, fake_keyring):
        storage = KeyringStorage()
        storage.set("B_KEY", "b-value")
        storage.set("A_KEY", "a-value")
        storage.set("A_KEY", "a-value-2")

        assert storage.get("A_KEY") == "a-value-2"
        assert storage.list() == ["A_KEY", "B_KEY"]
        assert fake_keyring.entries[("clawvault", "B_KEY")] == "b-value"

    def test_delete_updates_index(self, fake_keyring):
        storage = KeyringStorage()
        storage.set("A_KEY", "a")
        storage.delete("A_KEY")
        storage.delete("A_KEY")

        assert storage.list() == []
        assert not storage.has("A_KEY")

    def test_write_failure_raises_storage_error(self, fake_keyring):
        """Test that backend errors are wrapped without the secret."""
        fake_keyring.fail_writes = True
        with pytest.raises(StorageError) as exc_info:
            KeyringStorage().set("A_KEY", "super-secret")

        assert "A_KEY" in str(exc_info.value)
        assert "super-secret" not in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, KeyringError)

    def test_corrupt_index_starts_over(self, fake_keyring):
        fake_keyring.entries[("clawvault", keyring_provider.INDEX_ENTRY)] = "{nope"
        storage = KeyringStorage()
        assert storage.list() == []
        storage.set("A_KEY", "a")
        assert storage.list() == ["A_KEY"]

    def test_keyring_available_rejects_fail_backend(self, monkeypatch):
        monkeypatch.setattr(
            keyring_provider.keyring, "get_keyring", lambda: fail.Keyring()
        )
        assert keyring_provider.keyring_available() is False


# ============================================================================
# Test FallbackStorage
# ============================================================================


class TestFallbackStorage:
    """Test cases for the encrypted file backend."""

    def test_round_trip_and_encryption(self, tmp_path, fast_kdf):
        storage = FallbackStorage(vault_dir=tmp_path)
        storage.set("A_KEY", "plain-secret-value")

        assert storage.get("A_KEY") == "plain-secret-value"
        assert storage.list() == ["A_KEY"]
        assert b"plain-secret-value" not in (tmp_path / "secrets.enc").read_bytes()

    def test_files_are_owner_only(self, tmp_path, fast_kdf):
        FallbackStorage(vault_dir=tmp_path).set("A_KEY", "v")

        for name in ("secrets.enc", ".salt"):
            assert stat.S_IMODE((tmp_path / name).stat().st_mode) == 0o600

    def test_persists_across_instances(self, tmp_path, fast_kdf):
        FallbackStorage(vault_dir=tmp_path).set("A_KEY", "v")
        assert FallbackStorage(vault_dir=tmp_path).has("A_KEY")

    def test_delete(self, tmp_path, fast_kdf):
        storage = FallbackStorage(vault_dir=tmp_path)
        storage.set("A_KEY", "v")
        storage.delete("A_KEY")
        assert storage.get("A_KEY") is None

    def test_changed_identity_cannot_decrypt(self, tmp_path, fast_kdf, monkeypatch):
        """Test that a different user identity gets a StorageError."""
        monkeypatch.setenv("USER", "alice")
        FallbackStorage(vault_dir=tmp_path).set("A_KEY", "alice-secret")

        monkeypatch.setenv("USER", "mallory")
        with pytest.raises(StorageError) as exc_info:
            FallbackStorage(vault_dir=tmp_path).get("A_KEY")
        assert "alice-secret" not in str(exc_info.value)

    def test_logs_weaker_storage_warning(self, tmp_path, caplog):
        with caplog.at_level("WARNING"):
            FallbackStorage(vault_dir=tmp_path)
        assert "fallback encrypted file storage" in caplog.text


# ============================================================================
# Test AuditedStorage
# ============================================================================


class TestAuditedStorage:
    """Test cases for the audit wrapper."""

    def test_records_metadata_only(self, tmp_path):
        log = AuditLog(tmp_path / "audit.log")
        storage = AuditedStorage(MemoryStorage(), log)

        storage.set("A_KEY", "never-logged-value")
        storage.get("A_KEY")
        storage.has("A_KEY")

        raw = (tmp_path / "audit.log").read_text()
        assert "never-logged-value" not in raw
        entries = log.read_recent()
        assert [e["action"] for e in entries] == ["set", "get", "has"]
        assert all(e["secretName"] == "A_KEY" and e["success"] for e in entries)
        assert stat.S_IMODE((tmp_path / "audit.log").stat().st_mode) == 0o600

    def test_records_failure_type_and_reraises(self, tmp_path, failing_storage):
        log = AuditLog(tmp_path / "audit.log")
        storage = AuditedStorage(failing_storage(1, message="leaky value"), log)

        with pytest.raises(RuntimeError):
            storage.set("A_KEY", "v")

        entry = log.read_recent()[-1]
        assert entry["success"] is False
        assert entry["error"] == "RuntimeError"
        assert "leaky value" not in (tmp_path / "audit.log").read_text()

    def test_read_recent_skips_malformed_lines(self, tmp_path):
        path = tmp_path / "audit.log"
        path.write_text(json.dumps({"action": "set"}) + "\nnot-json\n")
        assert AuditLog(path).read_recent() == [{"action": "set"}]

    def test_unwritable_log_does_not_raise(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        storage = AuditedStorage(MemoryStorage(), AuditLog(blocker / "audit.log"))
        storage.set("A_KEY", "v")
        assert storage.get("A_KEY") == "v"


# ============================================================================
# Test create_storage
# ============================================================================


class TestCreateStorage:
    def test_falls_back_without_keyring(self, tmp_path, monkeypatch, fast_kdf):
        monkeypatch.setenv("CLAWVAULT_HOME", str(tmp_path))
        monkeypatch.setattr("clawvault.storage.keyring_available", lambda: False)

        storage = create_storage()

        assert isinstance(storage, AuditedStorage)
        assert isinstance(storage.inner, FallbackStorage)
        storage.set("A_KEY", "v")
        assert (tmp_path / "audit.log").exists()

    def test_prefers_keyring(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CLAWVAULT_HOME", str(tmp_path))
        monkeypatch.setattr("clawvault.storage.keyring_available", lambda: True)

        storage = create_storage()

        assert isinstance(storage.inner, KeyringStorage)

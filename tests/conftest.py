"""Pytest configuration and shared fixtures for ClawVault tests."""

import json
from pathlib import Path

import pytest

from clawvault.storage import MemoryStorage


@pytest.fixture
def memory_storage():
    """Provide an empty in-memory storage backend."""
    return MemoryStorage()


@pytest.fixture
def openclaw_dir(tmp_path):
    """Provide an empty OpenClaw root directory."""
    root = tmp_path / "openclaw"
    root.mkdir()
    return root


@pytest.fixture
def write_auth_store(openclaw_dir):
    """Provide a helper writing ``agents/<id>/agent/auth-profiles.json``.

    Returns:
        A function ``(agent_id, content) -> Path``. ``content`` is either a
        JSON-serializable object or a raw string written verbatim.
    """

    def _write(agent_id: str, content) -> Path:
        agent_dir = openclaw_dir / "agents" / agent_id / "agent"
        agent_dir.mkdir(parents=True, exist_ok=True)
        path = agent_dir / "auth-profiles.json"
        raw = content if isinstance(content, str) else json.dumps(content)
        path.write_text(raw, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mixed_auth_store():
    """Provide an auth store with api_key, oauth and already-migrated profiles."""
    return {
        "version": 1,
        "profiles": {
            "anthropic:default": {
                "type": "api_key",
                "provider": "anthropic",
                "key": "api-key-abc",
            },
            "google:user@example.com": {
                "type": "oauth",
                "provider": "google",
                "accessToken": "access-token-xyz",
                "refreshToken": "refresh-token-zzz",
            },
            "already:done": {
                "type": "api_key",
                "provider": "already",
                "key": "${EXISTING_ENV}",
            },
        },
    }


class FailingStorage(MemoryStorage):
    """Memory storage whose ``set`` fails on the n-th call (1-based)."""

    def __init__(self, fail_on_call: int, message: str = "backend down") -> None:
        super().__init__()
        self.fail_on_call = fail_on_call
        self.message = message
        self.calls = 0

    def set(self, name: str, value: str) -> None:
        self.calls += 1
        if self.calls == self.fail_on_call:
            raise RuntimeError(self.message)
        super().set(name, value)


@pytest.fixture
def failing_storage():
    """Provide a factory for storage that fails on the n-th ``set`` call."""
    return FailingStorage

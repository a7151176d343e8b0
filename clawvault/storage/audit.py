"""Audit wrapper recording storage operations as metadata-only JSON lines."""

import datetime
import json
import logging
import os
from pathlib import Path
from typing import Any

from .base import Storage

logger = logging.getLogger(__name__)

# Keys that must never appear in an audit entry.
FORBIDDEN_KEYS = ("value", "secret", "password", "token", "key")


class AuditLog:
    """Appends audit entries to a JSON lines file with mode 0600."""

    def __init__(self, log_path: str | Path) -> None:
        self.log_path = Path(log_path)

    def record(
        self,
        action: str,
        name: str,
        success: bool,
        error: BaseException | None = None,
    ) -> None:
        """Append one entry. Failures to write the log are logged, not raised."""
        entry: dict[str, Any] = {
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "action": action,
            "secretName": name,
            "success": success,
        }
        if error is not None:
            # Only the exception type: messages from backends are not trusted.
            entry["error"] = type(error).__name__
        for key in FORBIDDEN_KEYS:
            entry.pop(key, None)

        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
            with os.fdopen(fd, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.warning(f"Could not write audit log {self.log_path}: {e}")

    def read_recent(self, limit: int = 100) -> list[dict[str, Any]]:
        """Return the last ``limit`` parseable entries."""
        if not self.log_path.exists():
            return []
        entries = []
        for line in self.log_path.read_text(encoding="utf-8").splitlines()[-limit:]:
            try:
                entries.append(json.loads(line))
            except ValueError:
                logger.debug("Skipping malformed audit line")
        return entries


class AuditedStorage:
    """Wraps a storage backend and audits every call."""

    def __init__(self, inner: Storage, audit_log: AuditLog) -> None:
        self.inner = inner
        self.audit_log = audit_log

    def _run(self, action: str, name: str, call, *args):
        try:
            result = call(*args)
        except Exception as e:
            self.audit_log.record(action, name, success=False, error=e)
            raise
        self.audit_log.record(action, name, success=True)
        return result

    def set(self, name: str, value: str) -> None:
        self._run("set", name, self.inner.set, name, value)

    def get(self, name: str) -> str | None:
        return self._run("get", name, self.inner.get, name)

    def delete(self, name: str) -> None:
        self._run("delete", name, self.inner.delete, name)

    def list(self) -> list[str]:
        return self._run("list", "all", self.inner.list)

    def has(self, name: str) -> bool:
        return self._run("has", name, self.inner.has, name)

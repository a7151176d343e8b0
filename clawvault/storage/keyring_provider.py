"""OS keyring storage (GNOME Keyring / KWallet, macOS Keychain, Windows
Credential Manager) through the ``keyring`` library.
"""

import json
import logging

import keyring
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

from ..errors import StorageError

logger = logging.getLogger(__name__)

SERVICE_NAME = "clawvault"

# keyring cannot enumerate entries, so secret names are tracked in an
# index entry stored under the same service.
INDEX_ENTRY = "__clawvault_index__"


def keyring_available() -> bool:
    """Return True if a real (non-fail) keyring backend is configured."""
    backend = keyring.get_keyring()
    if isinstance(backend, fail.Keyring):
        return False
    return getattr(backend, "priority", 0) > 0


class KeyringStorage:
    """Secret storage backed by the platform keyring."""

    def __init__(self, service_name: str = SERVICE_NAME) -> None:
        self.service_name = service_name

    def set(self, name: str, value: str) -> None:
        try:
            keyring.set_password(self.service_name, name, value)
        except KeyringError as e:
            raise StorageError(f"Keyring write failed for {name}") from e
        names = self._read_index()
        if name not in names:
            names.append(name)
            self._write_index(names)

    def get(self, name: str) -> str | None:
        try:
            return keyring.get_password(self.service_name, name)
        except KeyringError as e:
            raise StorageError(f"Keyring read failed for {name}") from e

    def delete(self, name: str) -> None:
        try:
            keyring.delete_password(self.service_name, name)
        except PasswordDeleteError:
            logger.debug(f"Keyring entry {name} was already absent")
        except KeyringError as e:
            raise StorageError(f"Keyring delete failed for {name}") from e
        names = self._read_index()
        if name in names:
            names.remove(name)
            self._write_index(names)

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def _read_index(self) -> list[str]:
        try:
            raw = keyring.get_password(self.service_name, INDEX_ENTRY)
        except KeyringError as e:
            raise StorageError("Keyring index read failed") from e
        if not raw:
            return []
        try:
            names = json.loads(raw)
        except ValueError:
            logger.warning("Keyring index is corrupt; starting a new one")
            return []
        return [n for n in names if isinstance(n, str)]

    def _write_index(self, names: list[str]) -> None:
        try:
            keyring.set_password(self.service_name, INDEX_ENTRY, json.dumps(sorted(names)))
        except KeyringError as e:
            raise StorageError("Keyring index write failed") from e

    def list(self) -> list[str]:
        return self._read_index()

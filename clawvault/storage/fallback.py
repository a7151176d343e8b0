"""
Encrypted file storage for machines without a usable keyring.

Stores secrets in a Fernet-encrypted JSON file under ``~/.clawvault``.
The encryption key is derived from user-specific data and a random salt.
This is weaker than a platform keyring, so a warning is logged whenever
the backend is created.
"""

import base64
import json
import logging
import os
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..errors import StorageError

logger = logging.getLogger(__name__)

FILE_MODE = 0o600
KDF_ITERATIONS = 390000


def get_vault_dir() -> Path:
    """Directory holding the encrypted store, salt and audit log."""
    return Path(os.environ.get("CLAWVAULT_HOME", Path.home() / ".clawvault"))


def _user_identity() -> str:
    return os.environ.get("USER") or os.environ.get("USERNAME") or "default"


def _derive_key(salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    material = (_user_identity() + "clawvault-key").encode()
    return base64.urlsafe_b64encode(kdf.derive(material))


class FallbackStorage:
    """Fernet-encrypted JSON file of name -> secret."""

    def __init__(self, vault_dir: str | Path | None = None) -> None:
        self.vault_dir = Path(vault_dir) if vault_dir is not None else get_vault_dir()
        self.store_file = self.vault_dir / "secrets.enc"
        self.salt_file = self.vault_dir / ".salt"
        self._fernet: Fernet | None = None
        logger.warning(
            "Using fallback encrypted file storage. This is less secure than "
            "platform keyring storage; install your platform keyring tools "
            "(e.g. libsecret on Linux) for better security."
        )

    def set(self, name: str, value: str) -> None:
        secrets = self._read()
        secrets[name] = value
        self._write(secrets)

    def get(self, name: str) -> str | None:
        return self._read().get(name)

    def delete(self, name: str) -> None:
        secrets = self._read()
        if secrets.pop(name, None) is not None:
            self._write(secrets)

    def list(self) -> list[str]:
        return sorted(self._read())

    def has(self, name: str) -> bool:
        return name in self._read()

    def _get_fernet(self) -> Fernet:
        if self._fernet is None:
            self._fernet = Fernet(_derive_key(self._get_or_create_salt()))
        return self._fernet

    def _get_or_create_salt(self) -> bytes:
        if self.salt_file.exists():
            return self.salt_file.read_bytes()
        self.vault_dir.mkdir(parents=True, exist_ok=True)
        salt = os.urandom(16)
        self.salt_file.write_bytes(salt)
        os.chmod(self.salt_file, FILE_MODE)
        return salt

    def _read(self) -> dict[str, str]:
        if not self.store_file.exists():
            return {}
        try:
            decrypted = self._get_fernet().decrypt(self.store_file.read_bytes())
        except InvalidToken as e:
            raise StorageError(
                f"Cannot decrypt {self.store_file}; the salt or user identity changed"
            ) from e
        return json.loads(decrypted.decode("utf-8"))

    def _write(self, secrets: dict[str, str]) -> None:
        self.vault_dir.mkdir(parents=True, exist_ok=True)
        encrypted = self._get_fernet().encrypt(json.dumps(secrets).encode("utf-8"))
        tmp = self.store_file.with_name(f"{self.store_file.name}.tmp.{os.getpid()}")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "wb") as f:
            f.write(encrypted)
        os.replace(tmp, self.store_file)

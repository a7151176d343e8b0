"""Secret storage backends.

Auto-detects the platform keyring and falls back to encrypted file
storage when none is usable. Every backend returned by
:func:`create_storage` is wrapped in an audit log.
"""

import logging

from .audit import AuditedStorage, AuditLog
from .base import MemoryStorage, Storage
from .fallback import FallbackStorage, get_vault_dir
from .keyring_provider import KeyringStorage, keyring_available

logger = logging.getLogger(__name__)


def create_storage() -> Storage:
    """Create the storage backend for this machine.

    Returns:
        KeyringStorage when a real keyring backend is configured, otherwise
        FallbackStorage, wrapped in AuditedStorage.
    """
    if keyring_available():
        logger.debug("Using platform keyring storage")
        inner: Storage = KeyringStorage()
    else:
        inner = FallbackStorage()
    return AuditedStorage(inner, AuditLog(get_vault_dir() / "audit.log"))


__all__ = [
    "Storage",
    "MemoryStorage",
    "KeyringStorage",
    "FallbackStorage",
    "AuditedStorage",
    "AuditLog",
    "create_storage",
    "keyring_available",
    "get_vault_dir",
]

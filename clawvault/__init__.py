"""ClawVault: move OpenClaw credentials out of plaintext auth stores.

This package migrates plaintext secrets in per-agent ``auth-profiles.json``
files into the platform keyring (or an encrypted file fallback), leaving
``${ENV_VAR}`` placeholders that the gateway resolves at start time.
"""

from .config import MigrationConfig, load_config
from .errors import (
    AuthStoreAccessFailure,
    BackupNotFound,
    ClawVaultError,
    ConfigError,
    DiscoveryFailure,
    InvalidAuthStoreFormat,
    InvalidBackup,
    InvalidEnvVarName,
    StorageError,
    StorageWriteFailure,
)
from .migrator import (
    BatchOptions,
    MigrationFileReport,
    MigrationOptions,
    build_env_var_name,
    discover_auth_store_paths,
    is_env_placeholder,
    migrate_all_auth_stores,
    migrate_auth_store_file,
)
from .storage import MemoryStorage, Storage, create_storage

__all__ = [
    # Migration
    "migrate_all_auth_stores",
    "migrate_auth_store_file",
    "discover_auth_store_paths",
    "build_env_var_name",
    "is_env_placeholder",
    "MigrationOptions",
    "BatchOptions",
    "MigrationFileReport",
    # Config
    "MigrationConfig",
    "load_config",
    # Storage
    "Storage",
    "MemoryStorage",
    "create_storage",
    # Errors
    "ClawVaultError",
    "ConfigError",
    "DiscoveryFailure",
    "InvalidAuthStoreFormat",
    "AuthStoreAccessFailure",
    "InvalidEnvVarName",
    "StorageError",
    "StorageWriteFailure",
    "BackupNotFound",
    "InvalidBackup",
]

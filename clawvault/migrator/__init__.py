"""OpenClaw auth store migration.

Moves plaintext credentials out of per-agent ``auth-profiles.json`` files
into secret storage and replaces them with ``${ENV_VAR}`` placeholders.

Pipeline:
- Discovery of one auth store per agent
- Per-profile classification with deterministic env var naming
- Storage writes, backup and atomic rewrite (apply mode only)
- Metadata-only reports
"""

from .batch import migrate_all_auth_stores, summarize
from .classifier import (
    OAUTH_SECRET_FIELDS,
    ApiKeyCredential,
    CredentialClassifier,
    FieldMigration,
    OAuthCredential,
    OtherCredential,
    ProfileClassification,
    parse_credential,
)
from .discovery import (
    AUTH_PROFILE_FILENAME,
    AuthStoreLocation,
    discover_auth_store_paths,
    get_default_openclaw_dir,
)
from .file_migrator import FileMigrator, migrate_auth_store_file
from .logger import MigrationLogger
from .naming import (
    build_env_var_name,
    is_env_placeholder,
    to_placeholder,
    validate_env_var_name,
)
from .restore import RestoreResult, restore_from_backup
from .schemas import (
    BatchOptions,
    BatchSummary,
    MigrationChange,
    MigrationFileReport,
    MigrationOptions,
    SkipReason,
    SkipRecord,
)

__all__ = [
    # Naming
    "build_env_var_name",
    "validate_env_var_name",
    "is_env_placeholder",
    "to_placeholder",
    # Classifier
    "CredentialClassifier",
    "ProfileClassification",
    "FieldMigration",
    "ApiKeyCredential",
    "OAuthCredential",
    "OtherCredential",
    "parse_credential",
    "OAUTH_SECRET_FIELDS",
    # Discovery
    "AUTH_PROFILE_FILENAME",
    "AuthStoreLocation",
    "discover_auth_store_paths",
    "get_default_openclaw_dir",
    # Migration
    "FileMigrator",
    "migrate_auth_store_file",
    "migrate_all_auth_stores",
    "summarize",
    # Restore
    "RestoreResult",
    "restore_from_backup",
    # Logger
    "MigrationLogger",
    # Schemas
    "MigrationOptions",
    "BatchOptions",
    "MigrationChange",
    "MigrationFileReport",
    "SkipReason",
    "SkipRecord",
    "BatchSummary",
]

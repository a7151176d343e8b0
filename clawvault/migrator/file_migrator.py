"""Migration of a single auth store file.

This module handles the actual file migration, including:
- Reading and validating the auth store JSON
- Classifying every profile
- Writing eligible secrets to storage (apply mode only)
- Creating a timestamped backup before modification
- Atomically rewriting the file with ``${ENV_VAR}`` placeholders
"""

import json
import logging
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any

from ..errors import AuthStoreAccessFailure, InvalidAuthStoreFormat, StorageWriteFailure
from .classifier import CredentialClassifier, FieldMigration
from .naming import to_placeholder
from .schemas import MigrationChange, MigrationFileReport, MigrationOptions, SkipRecord

logger = logging.getLogger(__name__)

AUTH_STORE_FILE_MODE = 0o600


def read_auth_store(path: Path) -> dict[str, Any]:
    """Read an auth store and check its shape.

    Raises:
        AuthStoreAccessFailure: If the file cannot be read.
        InvalidAuthStoreFormat: If the file is not JSON, the root is not an
            object, or ``profiles`` is not an object. The message names the
            path only.
    """
    try:
        root = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise AuthStoreAccessFailure(path, "read") from e
    except ValueError:
        # Decoder messages can quote file content, so the cause is dropped.
        raise InvalidAuthStoreFormat(path, "not valid JSON") from None
    if not isinstance(root, dict):
        raise InvalidAuthStoreFormat(path, "not an object")
    if not isinstance(root.get("profiles"), dict):
        raise InvalidAuthStoreFormat(path, "missing profiles")
    return root


def serialize_auth_store(value: Any) -> bytes:
    """Render an auth store as indented UTF-8 JSON.

    Lone surrogates are valid in JSON text but not encodable as UTF-8, so
    they are written back as ``\\uXXXX`` escapes.
    """
    text = json.dumps(value, indent=2, ensure_ascii=False)
    return text.encode("utf-8", errors="backslashreplace")


def backup_file(path: Path) -> Path:
    """Copy ``path`` byte for byte to ``<path>.bak.<epoch-ms>``."""
    backup_path = path.with_name(f"{path.name}.bak.{int(time.time() * 1000)}")
    shutil.copyfile(path, backup_path)
    os.chmod(backup_path, AUTH_STORE_FILE_MODE)
    return backup_path


def write_file_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to a sibling temp file with mode 0600, then rename it over ``path``."""
    fd, tmp_name = tempfile.mkstemp(
        prefix=f"{path.name}.tmp.{os.getpid()}.", dir=path.parent
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, AUTH_STORE_FILE_MODE)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class FileMigrator:
    """Migrates plaintext secrets of one auth store into storage.

    Example:
        >>> migrator = FileMigrator(MigrationOptions(dry_run=False, storage=storage))
        >>> report = migrator.migrate("main", Path("auth-profiles.json"))
        >>> report.changed
        True
    """

    def __init__(self, options: MigrationOptions | None = None) -> None:
        """Initialize the FileMigrator.

        Args:
            options: Migration options. Defaults to a dry-run with OAuth
                included, prefix ``OPENCLAW`` and backups enabled.
        """
        self.options = options or MigrationOptions()
        self.classifier = CredentialClassifier(
            prefix=self.options.prefix,
            include_oauth=self.options.include_oauth,
            profile_env_var_map=self.options.profile_env_var_map,
        )
        self._storage = self.options.storage

    @property
    def storage(self):
        """Storage backend, created on first use when none was given."""
        if self._storage is None:
            from ..storage import create_storage

            self._storage = create_storage()
        return self._storage

    def migrate(self, agent_id: str, auth_store_path: str | Path) -> MigrationFileReport:
        """Migrate one auth store file.

        Args:
            agent_id: Agent owning the file.
            auth_store_path: Path of the auth store.

        Returns:
            A metadata-only report. ``changed`` is True whenever at least one
            field was (or would be) migrated, dry-run or not.

        Raises:
            InvalidAuthStoreFormat: If the file has the wrong shape.
            InvalidEnvVarName: If a generated or override name is invalid.
            StorageWriteFailure: If a storage write fails. The file is left
                unchanged; secrets written earlier in this file stay stored.
            AuthStoreAccessFailure: If the file cannot be read, backed up or
                rewritten. After a storage write the file is left unchanged
                and ``stored_env_vars`` names the secrets already stored.
        """
        path = Path(auth_store_path)
        dry_run = self.options.dry_run
        store = read_auth_store(path)
        profiles: dict[str, Any] = store["profiles"]

        migrations: list[FieldMigration] = []
        skipped: list[SkipRecord] = []
        for profile_id, entry in profiles.items():
            classification = self.classifier.classify(profile_id, entry)
            migrations.extend(classification.migrations)
            skipped.extend(classification.skipped)

        updated_store = {**store, "profiles": self._updated_profiles(profiles, migrations)}
        # Serialized before any secret is stored so encoding can't fail later.
        data = serialize_auth_store(updated_store)

        backup_path = None
        if migrations and not dry_run:
            self._write_secrets(agent_id, path, migrations)
            stored = [m.env_var for m in migrations]

            if self.options.backup:
                try:
                    backup_path = backup_file(path)
                except OSError as e:
                    self._warn_unreferenced(path, stored)
                    raise AuthStoreAccessFailure(path, "back up", stored) from e
                logger.info(f"Backed up {path} to {backup_path}")

            try:
                write_file_atomic(path, data)
            except OSError as e:
                self._warn_unreferenced(path, stored)
                raise AuthStoreAccessFailure(path, "rewrite", stored) from e
            logger.info(f"Rewrote {path} with {len(migrations)} placeholder(s)")

        changes = [
            MigrationChange(
                agent_id=agent_id,
                auth_store_path=str(path),
                profile_id=m.profile_id,
                provider=m.provider,
                field=m.field,
                env_var=m.env_var,
                length=len(m.value),
            )
            for m in migrations
        ]
        return MigrationFileReport(
            agent_id=agent_id,
            auth_store_path=str(path),
            dry_run=dry_run,
            changed=bool(changes),
            changes=changes,
            skipped=skipped,
            backup_path=str(backup_path) if backup_path else None,
        )

    @staticmethod
    def _updated_profiles(
        profiles: dict[str, Any], migrations: list[FieldMigration]
    ) -> dict[str, Any]:
        updated = dict(profiles)
        for m in migrations:
            updated[m.profile_id] = {
                **updated[m.profile_id],
                m.field: to_placeholder(m.env_var),
            }
        return updated

    @staticmethod
    def _warn_unreferenced(path: Path, stored: list[str]) -> None:
        if stored:
            logger.warning(
                f"{len(stored)} secret(s) from {path} were stored but are not "
                f"yet referenced by the file: {', '.join(stored)}"
            )

    def _write_secrets(
        self, agent_id: str, path: Path, migrations: list[FieldMigration]
    ) -> None:
        storage = self.storage
        stored: list[str] = []
        for m in migrations:
            try:
                storage.set(m.env_var, m.value)
            except Exception as e:
                self._warn_unreferenced(path, stored)
                raise StorageWriteFailure(
                    agent_id=agent_id,
                    profile_id=m.profile_id,
                    field=m.field,
                    env_var=m.env_var,
                    provider=m.provider,
                    auth_store_path=str(path),
                    stored_env_vars=stored,
                ) from e
            stored.append(m.env_var)
            logger.debug(f"Stored {m.env_var} ({m.profile_id}/{m.field})")


def migrate_auth_store_file(
    agent_id: str,
    auth_store_path: str | Path,
    options: MigrationOptions | None = None,
) -> MigrationFileReport:
    """Convenience wrapper around :meth:`FileMigrator.migrate`."""
    return FileMigrator(options).migrate(agent_id, auth_store_path)

"""Batch migration across every discovered auth store."""

import logging

from ..errors import AuthStoreAccessFailure, InvalidAuthStoreFormat, StorageWriteFailure
from .discovery import discover_auth_store_paths
from .file_migrator import FileMigrator
from .schemas import BatchOptions, BatchSummary, MigrationFileReport, MigrationOptions

logger = logging.getLogger(__name__)

# Failures that are recorded on the file's report instead of aborting the
# batch, unless fail_fast is set.
ISOLATED_FAILURES = (AuthStoreAccessFailure, InvalidAuthStoreFormat, StorageWriteFailure)


def migrate_all_auth_stores(
    options: BatchOptions | None = None,
) -> list[MigrationFileReport]:
    """Migrate every auth store under the OpenClaw root, one file at a time.

    Args:
        options: Batch options. Defaults to a dry-run over ``~/.openclaw``.

    Returns:
        One report per discovered file, in discovery order. A file that
        failed carries ``error`` and no changes.

    Raises:
        DiscoveryFailure: If the agents directory cannot be listed.
        InvalidEnvVarName: If an override or generated name is invalid.
        AuthStoreAccessFailure, InvalidAuthStoreFormat, StorageWriteFailure:
            Only with ``fail_fast=True``.
    """
    options = options or BatchOptions()
    locations = discover_auth_store_paths(options.openclaw_dir, options.agent_id)

    file_options = MigrationOptions(
        dry_run=options.dry_run,
        include_oauth=options.include_oauth,
        prefix=options.prefix,
        backup=options.backup,
        profile_env_var_map=options.profile_env_var_map,
        storage=options.storage,
    )
    migrator = FileMigrator(file_options)

    reports: list[MigrationFileReport] = []
    for location in locations:
        logger.debug(f"Migrating {location.auth_store_path} (agent={location.agent_id})")
        try:
            report = migrator.migrate(location.agent_id, location.auth_store_path)
        except ISOLATED_FAILURES as e:
            if options.fail_fast:
                raise
            logger.error(f"Skipping agent {location.agent_id}: {e}")
            report = MigrationFileReport(
                agent_id=location.agent_id,
                auth_store_path=str(location.auth_store_path),
                dry_run=options.dry_run,
                changed=False,
                error=str(e),
            )
        reports.append(report)
    return reports


def summarize(reports: list[MigrationFileReport]) -> BatchSummary:
    """Count scanned, changed and failed files and migrated secrets."""
    return BatchSummary(
        files_scanned=len(reports),
        files_changed=sum(1 for r in reports if r.changed),
        secrets_migrated=sum(len(r.changes) for r in reports),
        files_failed=sum(1 for r in reports if r.error),
    )

"""Pydantic schemas for migration options and reports.

Report models carry metadata only: names, paths, lengths and reasons.
They serialize with the camelCase keys used by the ``--json`` output,
e.g. ``report.model_dump_json(by_alias=True)``.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .naming import DEFAULT_PREFIX


# =============================================================================
# Enums
# =============================================================================


class SkipReason(str, Enum):
    """Why a profile field was not migrated."""

    MISSING = "missing"
    EMPTY = "empty"
    ALREADY_PLACEHOLDER = "already_placeholder"
    UNSUPPORTED_TYPE = "unsupported_type"
    MAP_IGNORED = "map_ignored"


# =============================================================================
# Report Schemas
# =============================================================================


class _ReportModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class MigrationChange(_ReportModel):
    """One field that was (or in dry-run, would be) migrated."""

    agent_id: str = Field(..., alias="agentId", description="Agent id")
    auth_store_path: str = Field(
        ..., alias="authStorePath", description="Path of the auth store file"
    )
    profile_id: str = Field(..., alias="profileId", description="Profile id")
    provider: str = Field(..., description="Resolved credential provider")
    field: str = Field(..., description="Credential field that was migrated")
    env_var: str = Field(..., alias="envVar", description="Target secret name")
    length: int = Field(..., ge=0, description="Length of the secret value")


class SkipRecord(_ReportModel):
    """A field or profile that was inspected and left alone."""

    profile_id: str = Field(..., alias="profileId", description="Profile id")
    provider: str = Field(..., description="Resolved credential provider")
    field: str = Field(..., description="Field name, or credential/oauth/map")
    reason: SkipReason = Field(..., description="Why nothing was migrated")


class MigrationFileReport(_ReportModel):
    """Result of migrating one auth store file."""

    agent_id: str = Field(..., alias="agentId")
    auth_store_path: str = Field(..., alias="authStorePath")
    dry_run: bool = Field(..., alias="dryRun")
    changed: bool = Field(..., description="True iff changes is non-empty")
    changes: list[MigrationChange] = Field(default_factory=list)
    skipped: list[SkipRecord] = Field(default_factory=list)
    backup_path: str | None = Field(
        None, alias="backupPath", description="Backup written before rewrite"
    )
    error: str | None = Field(
        None, description="Non-secret failure message when the file was isolated"
    )


class BatchSummary(BaseModel):
    """Counts across a batch of file reports."""

    files_scanned: int = 0
    files_changed: int = 0
    secrets_migrated: int = 0
    files_failed: int = 0


# =============================================================================
# Options
# =============================================================================


class MigrationOptions(BaseModel):
    """Options for migrating a single auth store file.

    ``storage`` is any object with a ``set(name, value)`` method. When it is
    None and the run is not a dry-run, the platform storage is created.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    dry_run: bool = Field(True, description="Report only, write nothing")
    include_oauth: bool = Field(True, description="Migrate oauth credentials")
    prefix: str = Field(DEFAULT_PREFIX, description="Env var name prefix")
    backup: bool = Field(True, description="Write a .bak copy before rewrite")
    profile_env_var_map: dict[str, str] = Field(
        default_factory=dict,
        description="Explicit env var names for api_key profiles",
    )
    storage: Any = Field(None, description="Secret storage backend", exclude=True)


class BatchOptions(MigrationOptions):
    """Options for migrating every discovered auth store."""

    openclaw_dir: str | None = Field(
        None, description="OpenClaw root directory (defaults to ~/.openclaw)"
    )
    agent_id: str | None = Field(None, description="Only migrate this agent")
    fail_fast: bool = Field(
        False, description="Abort the batch on the first failing file"
    )

"""CLI interface for the OpenClaw auth store migration.

This module provides a Click-based command-line interface for moving
plaintext secrets out of ``auth-profiles.json`` files into secret storage.

Usage:
    clawvault migrate                        # dry-run over ~/.openclaw
    clawvault migrate --apply
    clawvault migrate --apply --map anthropic:default=ANTHROPIC_API_KEY
    clawvault migrate --json
    clawvault restore ~/.openclaw/agents/main/agent/auth-profiles.json.bak.1700000000000 --yes
"""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from ..config import load_config
from ..errors import ClawVaultError
from .batch import migrate_all_auth_stores, summarize
from .logger import MigrationLogger
from .naming import ENV_VAR_NAME_PATTERN
from .restore import restore_from_backup
from .schemas import BatchOptions


def parse_profile_map(entries: tuple[str, ...] | list[str]) -> dict[str, str]:
    """Parse ``profileId=ENV_VAR`` entries.

    Raises:
        click.BadParameter: If an entry is malformed or the env var name
            fails the naming grammar.
    """
    mapping: dict[str, str] = {}
    for entry in entries:
        profile_id, sep, env_var = entry.partition("=")
        if not sep or not profile_id or not env_var:
            raise click.BadParameter(
                f"expected profileId=ENV_VAR, got: {entry}", param_hint="--map"
            )
        if not ENV_VAR_NAME_PATTERN.fullmatch(env_var):
            raise click.BadParameter(f"invalid env var: {env_var}", param_hint="--map")
        mapping[profile_id] = env_var
    return mapping


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
def main() -> None:
    """ClawVault: keep OpenClaw credentials out of plaintext JSON."""


@main.command()
@click.option("--apply", is_flag=True, default=False, help="Apply changes (default is dry-run)")
@click.option(
    "--openclaw-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="OpenClaw root directory (default: ~/.openclaw)",
)
@click.option("--agent-id", default=None, help="Only migrate a single agent by id")
@click.option("--prefix", default=None, help="Env var prefix (default: OPENCLAW)")
@click.option(
    "--api-keys-only",
    is_flag=True,
    default=False,
    help="Only migrate api_key credentials (skip OAuth)",
)
@click.option(
    "--no-backup",
    is_flag=True,
    default=False,
    help="Do not create .bak backup files when applying",
)
@click.option(
    "--map",
    "map_entries",
    multiple=True,
    metavar="PROFILE_ID=ENV_VAR",
    help="Map a profile id to a specific env var name (api_key only)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="CLAWVAULT_CONFIG",
    default=None,
    help="YAML migration settings (or set CLAWVAULT_CONFIG)",
)
@click.option(
    "--fail-fast",
    is_flag=True,
    default=False,
    help="Abort on the first failing file instead of continuing",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Output JSON report (metadata only)")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Print per-secret actions (metadata only)")
def migrate(
    apply: bool,
    openclaw_dir: Path | None,
    agent_id: str | None,
    prefix: str | None,
    api_keys_only: bool,
    no_backup: bool,
    map_entries: tuple[str, ...],
    config_path: Path | None,
    fail_fast: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    """Migrate plaintext auth-profiles.json secrets into secret storage.

    Each migrated field is replaced with a ${ENV_VAR} placeholder.

    Examples:

        # Preview what would be migrated
        clawvault migrate

        # Migrate, pinning one profile to a well-known env var
        clawvault migrate --apply --map anthropic:default=ANTHROPIC_API_KEY
    """
    _configure_logging(verbose)
    console = Console()
    logger = MigrationLogger(console=console, verbose=verbose)

    try:
        config = load_config(config_path)
        profile_map = {**config.profile_env_var_map, **parse_profile_map(map_entries)}
        options = BatchOptions(
            dry_run=not apply,
            openclaw_dir=str(openclaw_dir) if openclaw_dir else config.openclaw_dir,
            agent_id=agent_id,
            include_oauth=config.include_oauth and not api_keys_only,
            prefix=prefix if prefix is not None else config.prefix,
            backup=config.backup and not no_backup,
            profile_env_var_map=profile_map,
            fail_fast=config.fail_fast or fail_fast,
        )

        reports = migrate_all_auth_stores(options)
        summary = summarize(reports)

        if as_json:
            # Metadata only: reports never include secret values.
            click.echo(
                json.dumps(
                    [r.model_dump(by_alias=True, mode="json") for r in reports],
                    indent=2,
                )
            )
        else:
            logger.start(dry_run=options.dry_run)
            logger.summary(summary)
            logger.show_reports(reports)
            if options.dry_run:
                logger.dry_run_hint(summary)

        if summary.files_failed:
            sys.exit(1)

    except ClawVaultError as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Migration cancelled.")
        sys.exit(130)


@main.command()
@click.argument("backup_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt")
def restore(backup_path: Path, yes: bool) -> None:
    """Restore auth-profiles.json from a migration backup.

    BACKUP_PATH is the .bak file created during migration.
    """
    _configure_logging(False)
    logger = MigrationLogger(console=Console())

    try:
        preview = restore_from_backup(backup_path, confirm=False)
        logger.restore_preview(str(preview.backup_path), str(preview.target_path))

        if not yes and not click.confirm("Restore this backup?", default=False):
            logger.warning("Restore cancelled. Re-run with --yes to confirm.")
            sys.exit(1)

        result = restore_from_backup(backup_path, confirm=True)
        if result.safety_backup_path:
            logger.info(f"Created safety backup: {result.safety_backup_path}")
        logger.restore_complete(str(result.target_path), str(result.backup_path))
    except ClawVaultError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()

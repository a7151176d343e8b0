"""Restore an auth store from a migration backup."""

import json
import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path

from ..errors import BackupNotFound, InvalidBackup
from .discovery import AUTH_PROFILE_FILENAME

logger = logging.getLogger(__name__)


@dataclass
class RestoreResult:
    """Result of a restore request.

    Attributes:
        backup_path: Backup that was (or would be) restored.
        target_path: The ``auth-profiles.json`` next to the backup.
        restored: False when confirmation was not given.
        safety_backup_path: Copy of the target taken before overwriting it,
            if the target existed.
    """

    backup_path: Path
    target_path: Path
    restored: bool = False
    safety_backup_path: Path | None = None


def restore_from_backup(backup_path: str | Path, confirm: bool = False) -> RestoreResult:
    """Copy a ``.bak`` file back over the auth store in the same directory.

    Args:
        backup_path: Path of the backup written during migration.
        confirm: Without confirmation the backup is validated but nothing
            is written.

    Returns:
        RestoreResult describing what happened.

    Raises:
        BackupNotFound: If the backup does not exist.
        InvalidBackup: If the backup is not valid JSON.
    """
    backup_path = Path(backup_path)
    if not backup_path.is_file():
        raise BackupNotFound(backup_path)

    target_path = backup_path.parent / AUTH_PROFILE_FILENAME
    try:
        json.loads(backup_path.read_text(encoding="utf-8"))
    except ValueError:
        raise InvalidBackup(backup_path) from None

    result = RestoreResult(backup_path=backup_path, target_path=target_path)
    if not confirm:
        return result

    if target_path.exists():
        safety = target_path.with_name(
            f"{AUTH_PROFILE_FILENAME}.pre-restore.{int(time.time() * 1000)}"
        )
        shutil.copy2(target_path, safety)
        result.safety_backup_path = safety
        logger.info(f"Created safety backup: {safety}")

    shutil.copyfile(backup_path, target_path)
    result.restored = True
    logger.info(f"Restored {target_path} from {backup_path}")
    return result

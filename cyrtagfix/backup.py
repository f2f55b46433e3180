"""
backup — `.bak` snapshots taken right before a file is rewritten.
"""
from __future__ import annotations
import shutil
from pathlib import Path
from typing import Optional
import structlog

log = structlog.get_logger()

BACKUP_SUFFIX = ".bak"


class BackupError(OSError):
    """A backup copy of ``path`` could not be created."""

    def __init__(self, path: str | Path, error: object):
        self.path = Path(path)
        self.error = error
        super().__init__(f"backup of {path} failed: {error}")


def backup_path_for(path: str | Path) -> Path:
    """`<dir>/<name>` -> `<dir>/<name>.bak`"""
    path = Path(path)
    if not path.name:
        raise BackupError(path, "cannot determine file name")
    return path.with_name(path.name + BACKUP_SUFFIX)


class BackupManager:
    """Copies a file next to itself before it is modified, unless disabled."""

    def __init__(self, no_backup: bool = False):
        self.no_backup = no_backup

    def backup_file(self, path: str | Path) -> Optional[Path]:
        """
        Copy ``path`` to ``path.bak``, replacing an older backup.

        Returns the backup path (None when backups are disabled).
        Raises BackupError when the copy fails.
        """
        if self.no_backup:
            return None

        target = backup_path_for(path)
        try:
            shutil.copy(path, target)
        except OSError as e:
            raise BackupError(path, e) from e

        log.debug("backup_created", path=str(path), backup=str(target))
        return target

"""Copy files aside before they are overwritten."""
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from devsetup.config import SESSION_FORMAT
from devsetup.utils import log_info


class BackupGuard:
    """Per-run backup directory, created on first use.

    If ``directory`` is already taken (a second run in the same second) a
    numeric suffix is appended so earlier backups are never overwritten.
    """

    def __init__(self, directory: Union[str, Path],
                 now: Callable[[], datetime] = datetime.now):
        self.requested = Path(directory)
        self._now = now
        self._directory: Optional[Path] = None

    @property
    def directory(self) -> Optional[Path]:
        """The directory actually in use, or None before the first backup."""
        return self._directory

    def _ensure_directory(self) -> Path:
        if self._directory is not None:
            return self._directory
        candidate = self.requested
        suffix = 1
        while candidate.exists():
            candidate = self.requested.with_name(f"{self.requested.name}-{suffix}")
            suffix += 1
        candidate.mkdir(parents=True)
        log_info(f"Created backup directory at {candidate}")
        self._directory = candidate
        return candidate

    def backup(self, path: Union[str, Path]) -> Optional[Path]:
        """Copy ``path`` into the backup directory if it exists.

        Returns the backup path, or None when there was nothing to copy.
        """
        source = Path(path).expanduser()
        if not source.exists():
            return None

        directory = self._ensure_directory()
        stamp = self._now().strftime(SESSION_FORMAT)
        target = directory / f"{source.name}.{stamp}.bak"
        counter = 1
        while target.exists():
            target = directory / f"{source.name}.{stamp}.{counter}.bak"
            counter += 1

        log_info(f"Backing up {source} to {target}")
        if source.is_dir():
            shutil.copytree(source, target, symlinks=True)
        else:
            shutil.copy2(source, target)
        return target

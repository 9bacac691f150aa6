"""Per-run settings."""
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from devsetup.utils import get_real_home

SESSION_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_NETWORK_HOST = "github.com"


def session_stamp(now: Optional[datetime] = None) -> str:
    """Timestamp embedded in the log file and backup directory names."""
    return (now or datetime.now()).strftime(SESSION_FORMAT)


def default_log_dir() -> Path:
    return Path.cwd() / "logs"


def default_home() -> Path:
    return Path(get_real_home())


@dataclass
class RunConfig:
    """Settings for one provisioning session.

    ``home`` is where dotfiles are written; backups go under ``backup_root``,
    which defaults to ``home``. ``session`` is taken once when the config is
    built so the log file and the backup directory of a run share a stamp.
    """

    session: str = field(default_factory=session_stamp)
    log_dir: Path = field(default_factory=default_log_dir)
    home: Path = field(default_factory=default_home)
    backup_root: Optional[Path] = None
    dry_run: bool = False
    assume_yes: bool = False
    verbose: bool = False
    manager: Optional[str] = None
    network_host: str = DEFAULT_NETWORK_HOST

    @property
    def log_file(self) -> Path:
        return Path(self.log_dir) / f"devsetup_{self.session}.log"

    @property
    def backup_dir(self) -> Path:
        root = self.home if self.backup_root is None else self.backup_root
        return Path(root) / f".config_backup_{self.session}"

"""Utility functions for the provisioning tool."""
import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Union

import typer

LOGGER_NAME = "devsetup"

SKIP = 21
HEADER = 22
SUCCESS = 25

logging.addLevelName(SKIP, "SKIP")
logging.addLevelName(HEADER, "HEADER")
logging.addLevelName(SUCCESS, "SUCCESS")

FILE_FORMAT = "%(asctime)s: [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLORS = {
    logging.DEBUG: typer.colors.BRIGHT_BLACK,
    logging.INFO: typer.colors.BLUE,
    SKIP: typer.colors.YELLOW,
    HEADER: typer.colors.CYAN,
    SUCCESS: typer.colors.GREEN,
    logging.WARNING: typer.colors.YELLOW,
    logging.ERROR: typer.colors.RED,
}

BOX_WIDTH = 80

logger = logging.getLogger(LOGGER_NAME)


def command_exists(command: str) -> bool:
    """Check if a command exists in the system PATH."""
    return shutil.which(command) is not None


def is_root() -> bool:
    """Check if the script is running as root."""
    geteuid = getattr(os, "geteuid", None)
    if geteuid is None:
        # Windows has no euid; elevation is handled by the package manager.
        return False
    return geteuid() == 0


def get_real_home() -> str:
    """Get the real user's home directory (handles sudo)."""
    sudo_user = os.environ.get('SUDO_USER')
    if sudo_user:
        return os.path.expanduser(f'~{sudo_user}')
    return os.environ.get('HOME', str(Path.home()))


def is_wsl() -> bool:
    """Check if running under Windows Subsystem for Linux."""
    if os.environ.get("WSL_DISTRO_NAME"):
        return True
    for marker in ("/proc/version", "/proc/sys/kernel/osrelease"):
        try:
            text = Path(marker).read_text().lower()
        except OSError:
            continue
        if "microsoft" in text or "wsl" in text:
            return True
    return False


class ConsoleHandler(logging.Handler):
    """Render log records as colored, leveled terminal lines."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            color = LEVEL_COLORS.get(record.levelno, typer.colors.WHITE)
            if record.levelno == HEADER:
                border = "═" * BOX_WIDTH
                typer.echo("")
                typer.secho(f"╔{border}╗", fg=color, bold=True)
                typer.secho(f"║ {message}", fg=color, bold=True)
                typer.secho(f"╚{border}╝", fg=color, bold=True)
                return
            tag = typer.style(f"[{record.levelname}]", fg=color, bold=True)
            typer.echo(f"{tag} {message}")
        except Exception:
            self.handleError(record)


class SessionFormatter(logging.Formatter):
    """Session log formatter; every line of a multi-line message gets the prefix."""

    def __init__(self):
        super().__init__(FILE_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        text = record.getMessage()
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        record.asctime = self.formatTime(record, self.datefmt)
        lines = []
        for line in text.splitlines() or [""]:
            record.message = line
            lines.append(self.formatMessage(record))
        record.message = text
        return "\n".join(lines)


def setup_logging(verbose: bool = False, log_file: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Setup logging configuration.

    Installs a colored console handler and, when ``log_file`` is given, an
    append-only session log file. Handlers from an earlier call are replaced.
    Returns the log file path, if any.
    """
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    console = ConsoleHandler()
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.addHandler(console)

    if log_file is None:
        return None

    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(SessionFormatter())
    logger.addHandler(file_handler)
    return path


def log_info(message: str) -> None:
    """Log an informational message."""
    logger.info(message)


def log_success(message: str) -> None:
    logger.log(SUCCESS, message)


def log_warning(message: str) -> None:
    logger.warning(message)


def log_error(message: str) -> None:
    logger.error(message)


def log_skip(message: str) -> None:
    logger.log(SKIP, message)


def log_header(message: str) -> None:
    """Log a section header, boxed on the console."""
    logger.log(HEADER, message)


def log_debug(message: str) -> None:
    logger.debug(message)


def log_action(message: str) -> None:
    """Log an action being performed."""
    logger.info(f"  -> {message}")

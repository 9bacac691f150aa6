"""Checks that must pass before any provisioning starts."""
import platform
import socket
from dataclasses import dataclass
from typing import Callable, List

import sh

from devsetup.packages import PackageManager, run_command
from devsetup.utils import is_root, log_error, log_info, log_success, log_warning

SUPPORTED_PLATFORMS = ("Darwin", "Linux", "Windows")
NETWORK_PORT = 443
NETWORK_TIMEOUT = 3


class EnvironmentCheckFailed(Exception):
    """A precondition of the whole run does not hold; always fatal."""


@dataclass
class EnvironmentCheck:
    name: str
    check: Callable[[], bool]
    failure: str


def platform_supported() -> bool:
    return platform.system() in SUPPORTED_PLATFORMS


def has_privileges() -> bool:
    """True when running as root or sudo can be (re)validated."""
    if is_root() or platform.system() == "Windows":
        return True
    try:
        run_command("sudo", "-v")
    except (sh.ErrorReturnCode, sh.CommandNotFound):
        return False
    return True


def network_reachable(host: str, port: int = NETWORK_PORT, timeout: float = NETWORK_TIMEOUT) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def default_checks(manager: PackageManager, network_host: str, dry_run: bool = False) -> List[EnvironmentCheck]:
    checks = [
        EnvironmentCheck(
            "Supported platform",
            platform_supported,
            f"Platform {platform.system()} is not supported",
        ),
    ]
    if not dry_run:
        checks.append(EnvironmentCheck(
            "Administrator privileges",
            has_privileges,
            "Sudo privileges are required to run this tool.",
        ))
    checks.append(EnvironmentCheck(
        "Network connection",
        lambda: network_reachable(network_host),
        f"No internet connection detected (could not reach {network_host}).",
    ))
    if manager.name != "brew":
        # Homebrew is bootstrapped by its own unit when missing.
        checks.append(EnvironmentCheck(
            f"Package manager ({manager.name})",
            manager.available,
            f"{manager.command} was not found on PATH.",
        ))
    return checks


def validate_environment(checks: List[EnvironmentCheck]) -> None:
    """Run every check in order; raise on the first failure."""
    for item in checks:
        log_info(f"Checking {item.name.lower()}...")
        if not item.check():
            log_error(item.failure)
            raise EnvironmentCheckFailed(item.failure)
    if not checks:
        log_warning("No environment checks configured.")
        return
    log_success("System requirements check passed.")

"""Package manager capability interface and its per-manager variants."""
import os
import platform
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Sequence, Type

import sh

from devsetup.utils import command_exists, is_root, log_action, log_debug, log_error

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"


def run_command(*args: str) -> str:
    """Run a command and return its stdout; raises sh.ErrorReturnCode on failure."""
    command = sh.Command(args[0])
    return str(command(*args[1:]))


def describe_failure(exc: sh.ErrorReturnCode) -> str:
    stderr = exc.stderr.decode("utf-8", "replace").strip() if exc.stderr else ""
    return stderr.splitlines()[-1] if stderr else f"exit code {getattr(exc, 'exit_code', 'unknown')}"


class PackageManager(ABC):
    """Install packages through one native package manager.

    Subclasses supply the commands; callers only use ``is_installed``,
    ``install`` and ``update``.
    """

    name: str = ""
    command: str = ""
    needs_sudo: bool = False
    aliases: Dict[str, str] = {}

    def package_id(self, package: str) -> str:
        """Map a generic package name to this manager's identifier."""
        return self.aliases.get(package, package)

    def _privileged(self, *args: str) -> Sequence[str]:
        if self.needs_sudo and not is_root():
            return ("sudo",) + args
        return args

    def _run(self, *args: str) -> str:
        output = run_command(*self._privileged(*args))
        if output:
            log_debug(output.rstrip())
        return output

    def _succeeds(self, *args: str) -> bool:
        try:
            run_command(*args)
        except (sh.ErrorReturnCode, sh.CommandNotFound):
            return False
        return True

    def available(self) -> bool:
        return command_exists(self.command)

    @abstractmethod
    def is_installed(self, package: str) -> bool:
        ...

    @abstractmethod
    def install_args(self, package: str) -> Sequence[str]:
        ...

    @abstractmethod
    def update_args(self) -> Sequence[str]:
        ...

    def install(self, package: str) -> bool:
        """Install ``package``; a non-zero exit is reported as False."""
        log_action(f"Installing {package} with {self.name}...")
        try:
            self._run(*self.install_args(package))
        except sh.ErrorReturnCode as exc:
            log_error(f"{self.name} could not install {package}: {describe_failure(exc)}")
            return False
        return True

    def update(self) -> bool:
        log_action(f"Refreshing {self.name} package index...")
        try:
            self._run(*self.update_args())
        except sh.ErrorReturnCode as exc:
            log_error(f"{self.name} update failed: {describe_failure(exc)}")
            return False
        return True


class Apt(PackageManager):
    name = "apt"
    command = "apt-get"
    needs_sudo = True
    aliases = {"fd": "fd-find"}

    def is_installed(self, package: str) -> bool:
        return self._succeeds("dpkg", "-s", self.package_id(package))

    def install_args(self, package: str) -> Sequence[str]:
        return ("apt-get", "install", "-y", self.package_id(package))

    def update_args(self) -> Sequence[str]:
        return ("apt-get", "update")


class Dnf(PackageManager):
    name = "dnf"
    command = "dnf"
    needs_sudo = True
    aliases = {"fd": "fd-find"}

    def is_installed(self, package: str) -> bool:
        return self._succeeds("rpm", "-q", self.package_id(package))

    def install_args(self, package: str) -> Sequence[str]:
        return ("dnf", "install", "-y", "--skip-unavailable", self.package_id(package))

    def update_args(self) -> Sequence[str]:
        return ("dnf", "makecache")


class Brew(PackageManager):
    name = "brew"
    command = "brew"
    # Apple Silicon first, then Intel
    prefixes = ("/opt/homebrew/bin", "/usr/local/bin")

    def is_installed(self, package: str) -> bool:
        return self._succeeds("brew", "list", self.package_id(package))

    def install_args(self, package: str) -> Sequence[str]:
        return ("brew", "install", self.package_id(package))

    def update_args(self) -> Sequence[str]:
        return ("brew", "update")

    def bootstrap(self) -> bool:
        """Install Homebrew itself from the official install script."""
        log_action("Homebrew not found. Installing Homebrew...")
        install_script = run_command("curl", "-fsSL", HOMEBREW_INSTALL_URL)
        run_command("bash", "-c", install_script)
        self.add_to_path()
        return True

    def add_to_path(self) -> None:
        """Make a freshly installed brew visible to later commands in this process."""
        if command_exists("brew"):
            return
        for prefix in self.prefixes:
            if Path(prefix, "brew").exists():
                os.environ['PATH'] = f"{prefix}:{os.environ.get('PATH', '')}"
                log_debug(f"Added {prefix} to PATH")
                return


# TODO: sh refuses to import on native Windows; winget and choco need a
# subprocess-based run_command there before they work outside WSL.
class Winget(PackageManager):
    name = "winget"
    command = "winget"
    aliases = {
        "git": "Git.Git",
        "ripgrep": "BurntSushi.ripgrep.MSVC",
        "bat": "sharkdp.bat",
        "fd": "sharkdp.fd",
        "fzf": "junegunn.fzf",
        "jq": "jqlang.jq",
        "docker": "Docker.DockerDesktop",
    }

    def is_installed(self, package: str) -> bool:
        return self._succeeds("winget", "list", "--id", self.package_id(package), "-e")

    def install_args(self, package: str) -> Sequence[str]:
        return ("winget", "install", "--id", self.package_id(package), "-e",
                "--accept-source-agreements", "--accept-package-agreements")

    def update_args(self) -> Sequence[str]:
        return ("winget", "source", "update")


class Choco(PackageManager):
    name = "choco"
    command = "choco"
    aliases = {"docker": "docker-desktop"}

    def is_installed(self, package: str) -> bool:
        try:
            output = run_command("choco", "list", "--exact", "--limit-output", self.package_id(package))
        except (sh.ErrorReturnCode, sh.CommandNotFound):
            return False
        return bool(output.strip())

    def install_args(self, package: str) -> Sequence[str]:
        return ("choco", "install", self.package_id(package), "-y")

    def update_args(self) -> Sequence[str]:
        return ("choco", "upgrade", "chocolatey", "-y")


MANAGERS: Dict[str, Type[PackageManager]] = {
    cls.name: cls for cls in (Apt, Dnf, Brew, Winget, Choco)
}

PREFERENCE = {
    "Darwin": ("brew",),
    "Linux": ("apt", "dnf", "brew"),
    "Windows": ("winget", "choco"),
}


def get_package_manager(name: Optional[str] = None) -> PackageManager:
    """Return the named manager, or the first one available on this platform.

    On macOS Homebrew is returned even when it is missing so that it can be
    bootstrapped.
    """
    if name is not None:
        try:
            return MANAGERS[name]()
        except KeyError:
            raise ValueError(
                f"Unknown package manager {name!r}; choose from {', '.join(sorted(MANAGERS))}"
            ) from None

    current_platform = platform.system()
    candidates = PREFERENCE.get(current_platform)
    if not candidates:
        raise NotImplementedError(f"Platform {current_platform} is not supported")

    for candidate in candidates:
        manager = MANAGERS[candidate]()
        if manager.available():
            return manager
    if current_platform == "Darwin":
        return Brew()
    raise RuntimeError(f"No supported package manager found on {current_platform}")

"""Provisioning workflow steps."""
from pathlib import Path
from typing import List, Optional

from devsetup.backup import BackupGuard
from devsetup.config import RunConfig
from devsetup.confirm import ConfirmationProvider
from devsetup.dotfiles import ALIASES, dotfile_unit
from devsetup.environment import default_checks
from devsetup.packages import Brew, PackageManager, get_package_manager
from devsetup.runner import RunReport, StepRunner
from devsetup.units import Step, WorkUnit, package_unit
from devsetup.utils import command_exists, is_wsl, log_info, log_warning

ESSENTIAL_PACKAGES = ["git", "curl", "wget", "zsh", "tmux", "unzip"]

# package -> command it provides
CLI_TOOLS = {
    "ripgrep": "rg",
    "bat": "bat",
    "fd": "fd",
    "fzf": "fzf",
    "jq": "jq",
    "htop": "htop",
}


def homebrew_unit(manager: Brew) -> WorkUnit:
    return WorkUnit(
        name="Homebrew",
        probe=lambda: command_exists("brew"),
        apply=manager.bootstrap,
    )


def refresh_index(manager: PackageManager) -> None:
    """Refresh package metadata; a failed refresh only warns."""
    if not manager.update():
        log_warning(f"Could not refresh the {manager.name} package index, continuing with cached metadata.")


def build_steps(manager: PackageManager, home: Path) -> List[Step]:
    """The default provisioning sequence for a workstation."""
    return [
        Step(
            "Homebrew",
            [homebrew_unit(manager)] if isinstance(manager, Brew) else [],
            applies=lambda: isinstance(manager, Brew),
        ),
        Step(
            "Essential packages",
            [package_unit(manager, name) for name in ESSENTIAL_PACKAGES],
            action=lambda: refresh_index(manager),
        ),
        Step("Command-line tools", [
            package_unit(manager, name, command=command) for name, command in CLI_TOOLS.items()
        ]),
        Step(
            "Container tools",
            [package_unit(manager, "docker", optional=True,
                          prompt="Do you want to install Docker?", default=False)],
            applies=lambda: not is_wsl(),
        ),
        Step("Shell aliases", [dotfile_unit(home / ".aliases", ALIASES, name="~/.aliases")]),
    ]


def provision_system(config: RunConfig, gate: ConfirmationProvider,
                     manager: Optional[PackageManager] = None) -> RunReport:
    """Main provisioning workflow - runs every step and returns the report."""
    if manager is None:
        manager = get_package_manager(config.manager)
    log_info(f"Using package manager: {manager.name}")

    runner = StepRunner(
        build_steps(manager, Path(config.home)),
        gate=gate,
        backup=BackupGuard(config.backup_dir),
        checks=default_checks(manager, config.network_host, dry_run=config.dry_run),
        dry_run=config.dry_run,
        log_file=config.log_file,
    )
    return runner.run()

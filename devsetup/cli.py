"""CLI interface for the provisioning tool."""
from pathlib import Path
from typing import Optional

import typer

from . import utils
from . import steps
from .config import DEFAULT_NETWORK_HOST, RunConfig, default_home, default_log_dir
from .confirm import AssumeYes, TerminalConfirmation


def setup(
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview changes without applying them"),
    yes: bool = typer.Option(False, "--yes", "-y", envvar="DEVSETUP_ASSUME_YES",
                             help="Answer yes to every confirmation prompt"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", envvar="DEVSETUP_LOG_DIR",
                                           help="Directory for the session log file [default: ./logs]"),
    home: Optional[Path] = typer.Option(None, "--home", envvar="DEVSETUP_HOME",
                                        help="Home directory that receives dotfiles [default: real user home]"),
    backup_root: Optional[Path] = typer.Option(None, "--backup-root", envvar="DEVSETUP_BACKUP_ROOT",
                                               help="Where the backup directory is created [default: home]"),
    manager: Optional[str] = typer.Option(None, "--manager", envvar="DEVSETUP_MANAGER",
                                          help="Force a package manager: apt, dnf, brew, winget or choco"),
    network_host: str = typer.Option(DEFAULT_NETWORK_HOST, "--network-host", envvar="DEVSETUP_NETWORK_HOST",
                                     help="Host used to check network reachability"),
):
    """Install and configure a developer workstation."""
    config = RunConfig(
        log_dir=log_dir or default_log_dir(),
        home=home or default_home(),
        backup_root=backup_root,
        dry_run=dry_run,
        assume_yes=yes,
        verbose=verbose,
        manager=manager,
        network_host=network_host,
    )
    utils.setup_logging(verbose, config.log_file)

    typer.secho("🚀 DEVELOPMENT ENVIRONMENT SETUP", fg=typer.colors.CYAN, bold=True)
    typer.echo(f"   • Log file: {config.log_file}")
    typer.echo(f"   • Backups: under {config.backup_dir.parent}, created on first backup")
    if dry_run:
        typer.echo("   • Dry run: nothing will be installed or written")
    typer.echo("")

    gate = AssumeYes() if yes else TerminalConfirmation()
    if not gate.confirm("🚀 Ready to begin the installation?", True):
        typer.secho("Installation aborted by user.", fg=typer.colors.RED)
        raise typer.Exit(1)

    try:
        report = steps.provision_system(config, gate)
    except (ValueError, NotImplementedError, RuntimeError) as exc:
        utils.log_error(str(exc))
        typer.echo(f"❗ {exc}")
        raise typer.Exit(1)

    if report.aborted:
        raise typer.Exit(report.exit_code)
    typer.echo("✅ Provisioning complete!")


app = typer.Typer(
    name="devsetup",
    help="A developer workstation provisioning tool.",
    add_completion=False,
    invoke_without_command=True,
    callback=setup,
)


if __name__ == "__main__":
    app()

"""Sequential step runner.

Two kinds of failure are distinguished:

* a unit's apply action returning False, raising ``UnitFailed`` or a
  non-zero package-manager exit (``sh.ErrorReturnCode``) is recorded as
  Failed and the run continues;
* anything else escaping a probe, backup, apply action or environment check
  aborts the run. The partial ledger counts and the log path are printed and
  the report comes back with ``aborted`` set.

Nothing that was already applied is rolled back; probes make re-running safe.
"""
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

import sh
import typer

from devsetup.backup import BackupGuard
from devsetup.confirm import ConfirmationProvider
from devsetup.environment import EnvironmentCheck, validate_environment
from devsetup.ledger import Entry, Ledger, Outcome, SkipReason, Summary, render_partial, render_summary
from devsetup.progress import ProgressReporter
from devsetup.units import Step, UnitFailed, WorkUnit
from devsetup.utils import (
    log_action,
    log_error,
    log_header,
    log_info,
    log_skip,
    log_success,
    log_warning,
)

REQUIREMENTS_STEP = "Checking system requirements"


@dataclass
class RunReport:
    summary: Summary
    aborted: bool = False
    error: Optional[BaseException] = None
    log_file: Optional[Path] = None
    backup_dir: Optional[Path] = None

    @property
    def exit_code(self) -> int:
        return 1 if self.aborted else 0


class StepRunner:
    """Owns the ledger, the progress counter and the backup guard of one run."""

    def __init__(self, steps: Sequence[Step], gate: ConfirmationProvider,
                 backup: BackupGuard,
                 checks: Sequence[EnvironmentCheck] = (),
                 dry_run: bool = False,
                 log_file: Optional[Path] = None,
                 clock: Callable[[], float] = time.monotonic,
                 echo: bool = True):
        self.steps = list(steps)
        self.gate = gate
        self.backup = backup
        self.checks = list(checks)
        self.dry_run = dry_run
        self.log_file = log_file
        self.echo = echo
        self.ledger = Ledger(clock=clock)
        total = len(self.steps) + (1 if self.checks else 0)
        self.progress = ProgressReporter(max(total, 1), clock=clock, echo=echo)

    def _print(self, lines, color=None, bold=False) -> None:
        if not self.echo:
            return
        for line in lines:
            typer.secho(line, fg=color, bold=bold)

    def execute(self, unit: WorkUnit) -> Entry:
        """Probe, confirm, back up and apply one unit, recording the outcome."""
        if unit.probe():
            log_skip(f"{unit.name} is already installed")
            return self.ledger.record(unit.name, Outcome.SKIPPED, SkipReason.ALREADY_SATISFIED)

        if unit.optional and not self.gate.confirm(unit.question, unit.default):
            log_info(f"Skipping {unit.name} (declined).")
            return self.ledger.record(unit.name, Outcome.SKIPPED, SkipReason.DECLINED)

        if self.dry_run:
            log_action(f"[DRY RUN] Would install {unit.name}")
            return self.ledger.record(unit.name, Outcome.SKIPPED, SkipReason.DRY_RUN)

        for path in unit.writes:
            self.backup.backup(path)

        try:
            ok = unit.apply()
        except UnitFailed as exc:
            log_error(f"{unit.name}: {exc}")
            ok = False
        except sh.ErrorReturnCode as exc:
            log_error(f"{unit.name}: command failed: {exc.full_cmd}")
            ok = False

        if ok:
            log_success(f"{unit.name} has been installed successfully")
            return self.ledger.record(unit.name, Outcome.INSTALLED)
        log_error(f"{unit.name} installation failed")
        return self.ledger.record(unit.name, Outcome.FAILED)

    def _header(self, name: str) -> None:
        log_header(f"STEP {self.progress.counter + 1}/{self.progress.total}: {name.upper()}")

    def run_step(self, step: Step) -> None:
        self._header(step.name)
        if step.applies is not None and not step.applies():
            log_info(f"{step.name} does not apply to this system. Skipping this step.")
        else:
            if step.action is not None:
                if self.dry_run:
                    log_action(f"[DRY RUN] Would run {step.name} preparation")
                else:
                    step.action()
            for unit in step.units:
                self.execute(unit)
        self.progress.advance()

    def run(self) -> RunReport:
        self.progress.start()
        try:
            if self.checks:
                self._header(REQUIREMENTS_STEP)
                validate_environment(self.checks)
                self.progress.advance()
            for step in self.steps:
                self.run_step(step)
        except Exception as exc:
            return self._abort(exc)
        return self._finish()

    def _finish(self) -> RunReport:
        summary = self.ledger.summarize()
        log_success("All installation and configuration steps are complete!")
        self._print([""] + render_summary(summary), typer.colors.CYAN)
        if self.log_file is not None:
            self._print([f"• Log file: {self.log_file}"])
        if self.backup.directory is not None:
            self._print([f"• Backup directory: {self.backup.directory}"])
        log_info(f"Run finished: {summary.status}")
        return RunReport(summary, log_file=self.log_file, backup_dir=self.backup.directory)

    def _abort(self, exc: Exception) -> RunReport:
        log_error(f"Unexpected error: {type(exc).__name__}: {exc}")
        summary = self.ledger.summarize()
        self._print(["", "💥 An error occurred. The run cannot continue."], typer.colors.RED, bold=True)
        if self.log_file is not None:
            self._print([f"📋 Please check the log file for details: {self.log_file}"], typer.colors.YELLOW)
        self._print([""] + render_partial(summary), typer.colors.YELLOW)
        self._print([
            "",
            "💡 You can re-run this tool after fixing the issue.",
            "   Components that are already installed will be skipped.",
        ], typer.colors.CYAN)
        log_warning(f"Run aborted after {summary.total} processed items")
        return RunReport(summary, aborted=True, error=exc,
                         log_file=self.log_file, backup_dir=self.backup.directory)

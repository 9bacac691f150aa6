"""Outcome ledger and end-of-run summary."""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from devsetup.progress import format_duration

NOTHING_PROCESSED = "NO ITEMS PROCESSED"


class Outcome(Enum):
    INSTALLED = "installed"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(Enum):
    ALREADY_SATISFIED = "already satisfied"
    DECLINED = "declined"
    DRY_RUN = "dry run"


@dataclass(frozen=True)
class Entry:
    name: str
    outcome: Outcome
    reason: Optional[SkipReason] = None

    @property
    def label(self) -> str:
        if self.reason is None:
            return self.name
        return f"{self.name} ({self.reason.value})"


@dataclass(frozen=True)
class Summary:
    """Snapshot of a ledger, ready for rendering."""

    elapsed: int
    installed: Tuple[Entry, ...]
    skipped: Tuple[Entry, ...]
    failed: Tuple[Entry, ...]

    @property
    def total(self) -> int:
        return len(self.installed) + len(self.skipped) + len(self.failed)

    @property
    def success_rate(self) -> Optional[int]:
        """Installed share of processed units, truncated; None when empty."""
        if self.total == 0:
            return None
        return len(self.installed) * 100 // self.total

    @property
    def status(self) -> str:
        if self.total == 0:
            return NOTHING_PROCESSED
        if not self.failed:
            return "SUCCESS (100%)"
        return f"PARTIAL ({self.success_rate}%)"


class Ledger:
    """Append-only record of every executed unit, in execution order."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.started_at = clock()
        self._entries: List[Entry] = []
        self._names = set()

    def record(self, name: str, outcome: Outcome, reason: Optional[SkipReason] = None) -> Entry:
        if name in self._names:
            raise ValueError(f"{name!r} is already recorded")
        if reason is not None and outcome is not Outcome.SKIPPED:
            raise ValueError(f"only skipped units carry a reason, got {outcome.value}")
        if outcome is Outcome.SKIPPED and reason is None:
            reason = SkipReason.ALREADY_SATISFIED
        entry = Entry(name, outcome, reason)
        self._entries.append(entry)
        self._names.add(name)
        return entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._names

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def _names_for(self, outcome: Outcome) -> List[str]:
        return [e.name for e in self._entries if e.outcome is outcome]

    @property
    def installed(self) -> List[str]:
        return self._names_for(Outcome.INSTALLED)

    @property
    def skipped(self) -> List[str]:
        return self._names_for(Outcome.SKIPPED)

    @property
    def failed(self) -> List[str]:
        return self._names_for(Outcome.FAILED)

    def summarize(self) -> Summary:
        def pick(outcome):
            return tuple(e for e in self._entries if e.outcome is outcome)

        return Summary(
            elapsed=int(self._clock() - self.started_at),
            installed=pick(Outcome.INSTALLED),
            skipped=pick(Outcome.SKIPPED),
            failed=pick(Outcome.FAILED),
        )


def render_summary(summary: Summary) -> List[str]:
    """Full end-of-run report lines."""
    lines = [
        "📊 INSTALLATION SUMMARY REPORT",
        f"⏱️  Total Installation Time: {format_duration(summary.elapsed)}",
        "",
    ]
    sections = (
        ("✅ SUCCESSFULLY INSTALLED", summary.installed),
        ("⏭️  SKIPPED", summary.skipped),
        ("❌ FAILED", summary.failed),
    )
    for title, entries in sections:
        if not entries:
            continue
        lines.append(f"{title} ({len(entries)} items):")
        lines.extend(f"   • {entry.label}" for entry in entries)
        lines.append("")

    if summary.total == 0:
        lines.append("Installation Status: no items processed")
    else:
        lines.append(f"Installation Status: {summary.status}")
    return lines


def render_partial(summary: Summary) -> List[str]:
    """Counts-only report printed when a run aborts."""
    lines = ["📊 PARTIAL INSTALLATION SUMMARY:"]
    if summary.total == 0:
        lines.append("No items processed before the failure.")
        return lines
    lines.append(f"✅ Successfully installed: {len(summary.installed)} items")
    lines.append(f"⏭️  Skipped: {len(summary.skipped)} items")
    lines.append(f"❌ Failed: {len(summary.failed)} items")
    return lines

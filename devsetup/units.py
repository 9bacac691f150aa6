"""Work units and steps."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from devsetup.utils import command_exists


class UnitFailed(Exception):
    """Raised by an apply action to report a classified, tolerated failure."""


@dataclass
class WorkUnit:
    """A named, idempotent piece of provisioning.

    ``probe`` answers whether the desired end state already holds and
    ``apply`` brings it about, returning True on success. Optional units ask
    ``prompt`` (default answer ``default``) before applying. Every path in
    ``writes`` is backed up before ``apply`` runs.
    """

    name: str
    probe: Callable[[], bool]
    apply: Callable[[], bool]
    optional: bool = False
    prompt: Optional[str] = None
    default: bool = False
    writes: Sequence[Path] = ()

    @property
    def question(self) -> str:
        return self.prompt or f"Install {self.name}?"


@dataclass
class Step:
    """A top-level stage; advances the progress bar once when done.

    ``action`` runs before the units and is not recorded in the ledger, so
    anything it raises aborts the run. When ``applies`` returns False the
    whole step is skipped.
    """

    name: str
    units: Sequence[WorkUnit] = field(default_factory=list)
    applies: Optional[Callable[[], bool]] = None
    action: Optional[Callable[[], None]] = None


def package_unit(manager, package: str, command: Optional[str] = None, **kwargs) -> WorkUnit:
    """Install ``package`` through ``manager`` unless it is already there.

    The unit counts as satisfied when ``command`` (defaults to the package
    name) is on PATH or the manager reports the package as installed.
    """
    binary = command or package

    def probe() -> bool:
        return command_exists(binary) or manager.is_installed(package)

    def apply() -> bool:
        return manager.install(package)

    return WorkUnit(name=package, probe=probe, apply=apply, **kwargs)

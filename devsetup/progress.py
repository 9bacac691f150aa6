"""Step progress bar with elapsed time and a linear ETA."""
import time
from typing import Callable, Optional, Tuple

import typer

BAR_WIDTH = 50
FILLED = "█"
EMPTY = "░"


def format_duration(seconds: float) -> str:
    """Format seconds as ``XhYmZs``, dropping leading zero units."""
    seconds = max(int(seconds), 0)
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def estimate(elapsed: int, counter: int, total: int) -> Optional[Tuple[int, int]]:
    """Project ``(estimated_total, remaining)`` seconds from progress so far.

    A single completed step gives no usable rate, so nothing is returned
    until ``counter`` is at least 2.
    """
    if counter <= 1:
        return None
    estimated_total = elapsed * total // counter
    return estimated_total, estimated_total - elapsed


class ProgressReporter:
    """Fixed-width progress bar driven by a bounded step counter."""

    def __init__(self, total: int, width: int = BAR_WIDTH,
                 clock: Callable[[], float] = time.monotonic,
                 echo: bool = True):
        if total < 1:
            raise ValueError(f"total must be at least 1, got {total}")
        self.total = total
        self.width = width
        self.counter = 0
        self._clock = clock
        self._echo = echo
        self.started_at = clock()
        self.step_started_at = self.started_at
        self.last_step_duration = 0

    def start(self) -> None:
        """Reset the run and step timers, e.g. once the user has confirmed."""
        self.started_at = self._clock()
        self.step_started_at = self.started_at

    @property
    def elapsed(self) -> int:
        return int(self._clock() - self.started_at)

    def advance(self) -> str:
        """Count one completed step and draw the bar."""
        now = self._clock()
        self.last_step_duration = int(now - self.step_started_at)
        self.step_started_at = now
        self.counter = min(self.counter + 1, self.total)
        line = self.render()
        if self._echo:
            typer.secho(line, fg=typer.colors.BLUE)
        return line

    def render(self) -> str:
        percentage = self.counter * 100 // self.total
        filled = self.counter * self.width // self.total
        bar = FILLED * filled + EMPTY * (self.width - filled)
        line = f"[{bar}] {percentage}% ({self.counter}/{self.total})"

        projection = estimate(self.elapsed, self.counter, self.total)
        if projection is not None:
            _, remaining = projection
            line += (f" ⏱️  Elapsed: {format_duration(self.elapsed)}"
                     f" | ETA: {format_duration(remaining)}")
            line += f" ✓ Step completed in {format_duration(self.last_step_duration)}"
        return line

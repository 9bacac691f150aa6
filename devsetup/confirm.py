"""Yes/no confirmation providers."""
from typing import Iterable, List, Protocol, Tuple

import typer

from devsetup.utils import log_info


class ConfirmationProvider(Protocol):
    def confirm(self, prompt: str, default: bool = False) -> bool:
        ...


class TerminalConfirmation:
    """Ask on the controlling terminal.

    Empty input takes the default, ``y``/``yes``/``n``/``no`` in any case
    answer the question, anything else re-prompts until a valid answer.
    """

    def confirm(self, prompt: str, default: bool = False) -> bool:
        styled = typer.style(prompt, fg=typer.colors.YELLOW)
        return typer.confirm(styled, default=default)


class AssumeYes:
    """Answer yes to every gate without reading input (``--yes``)."""

    def confirm(self, prompt: str, default: bool = False) -> bool:
        log_info(f"{prompt} -> yes (assumed)")
        return True


class ScriptedConfirmation:
    """Replay prepared answers; ``None`` stands for an empty reply."""

    def __init__(self, answers: Iterable = ()):
        self._answers = list(answers)
        self.asked: List[Tuple[str, bool]] = []

    def confirm(self, prompt: str, default: bool = False) -> bool:
        self.asked.append((prompt, default))
        if not self._answers:
            return default
        answer = self._answers.pop(0)
        return default if answer is None else bool(answer)

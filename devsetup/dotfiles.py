"""Managed dotfiles."""
from pathlib import Path
from typing import Optional, Union

from devsetup.units import WorkUnit

ALIASES = """\
# Managed by devsetup. Existing copies are backed up before every rewrite.

# Navigation
alias ..='cd ..'
alias ...='cd ../..'

# Git
alias g='git'
alias ga='git add'
alias gaa='git add -A'
alias gc='git commit -v'
alias gcm='git commit -m'
alias gp='git push'
alias gpf='git push --force-with-lease'
alias gpl='git pull'
alias gs='git status -sb'
alias gl='git log --oneline --graph --decorate'

# Modern replacements, only when installed
command -v bat >/dev/null 2>&1 && alias cat='bat --paging=never'
command -v rg >/dev/null 2>&1 && alias grep='rg'

# Networking
alias myip='curl -s ifconfig.me && echo'

# Containers
alias d='docker'
alias dps='docker ps -a'
"""


def has_content(path: Path, content: str) -> bool:
    try:
        return path.read_text(encoding="utf-8") == content
    except FileNotFoundError:
        return False


def dotfile_unit(path: Union[str, Path], content: str, name: Optional[str] = None) -> WorkUnit:
    """Write ``content`` to ``path`` unless it already holds exactly that."""
    target = Path(path).expanduser()

    def apply() -> bool:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return True

    return WorkUnit(
        name=name or target.name,
        probe=lambda: has_content(target, content),
        apply=apply,
        writes=(target,),
    )

import re
from collections.abc import Callable
from dataclasses import dataclass

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


@dataclass(frozen=True)
class Theme:
    red: str = "\033[38;5;203m"
    green: str = "\033[38;5;114m"
    yellow: str = "\033[38;5;221m"
    gray: str = "\033[38;5;245m"
    gold: str = "\033[38;5;220m"
    coral: str = "\033[38;5;209m"
    muted: str = "\033[90m"  # dim gray for secondary text
    bold: str = "\033[1m"
    reset: str = "\033[0m"


DEFAULT = Theme()
PLAIN = Theme(**{name: "" for name in Theme.__dataclass_fields__})
_active: Theme = DEFAULT


def use(theme: Theme) -> None:
    global _active
    _active = theme


_COLORS = {"red", "green", "yellow", "gray", "gold", "coral", "muted"}

POOL: list[str] = [
    "\033[38;5;209m",  # coral
    "\033[38;5;185m",  # butter
    "\033[38;5;113m",  # spring
    "\033[38;5;116m",  # seafoam
    "\033[38;5;81m",  # sky
    "\033[38;5;69m",  # cornflower
    "\033[38;5;134m",  # orchid
    "\033[38;5;217m",  # peach
]


def __getattr__(name: str) -> Callable[[str], str]:
    if name in _COLORS:

        def _wrap(text: str) -> str:
            return f"{getattr(_active, name)}{text}{_active.reset}"

        _wrap.__name__ = name
        return _wrap
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def bold(text: str) -> str:
    return f"{_active.bold}{text}{_active.reset}"


def tag_color(tag: str) -> str:
    if _active is PLAIN:
        return ""
    return POOL[sum(tag.encode()) % len(POOL)]


def strip(text: str) -> str:
    return _ANSI_RE.sub("", text)

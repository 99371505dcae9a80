from datetime import datetime

from tuffous.core.models import Todo
from tuffous.graph import is_leaf
from tuffous.progress import Progress, progress, progress_glyph
from tuffous.query import TreeRow
from tuffous.store import TodoStore

from . import ansi, clock

__all__ = ["format_status", "format_todo", "format_tree"]

BRANCH = "└─ "


def _fmt_tag(tag: str) -> str:
    color = ansi.tag_color(tag)
    return f"{color}[{tag}]{ansi._active.reset}" if color else f"[{tag}]"


def _flags(todo: Todo, now: datetime) -> str:
    flags = []
    if todo.scheduled_date and todo.scheduled_date == now.date():
        flags.append(ansi.gold("★"))
    if todo.completed:
        flags.append(ansi.green("✓"))
    if todo.deadline:
        if todo.deadline <= now:
            flags.append(ansi.red("⚠"))
        elif todo.deadline.date() == now.date():
            flags.append(ansi.coral("⚑"))
    return "".join(flags)


def format_todo(
    todo: Todo, now: datetime | None = None, counts: tuple[int, int] | None = None
) -> str:
    """One row of a listing.

    [flags] name[: details] [tags] [-@ date] [-! deadline] [weight bangs] [glyph (done/total)]
    """
    now = now or clock.now()
    parts = []

    flags = _flags(todo, now)
    if flags:
        parts.append(flags)

    title = todo.name if not todo.details else f"{todo.name}: {ansi.gray(todo.details)}"
    parts.append(title)

    parts.extend(_fmt_tag(tag) for tag in todo.tags)

    if todo.scheduled_date:
        parts.append(ansi.muted(f"-@ {todo.scheduled_date.isoformat()}"))
    if todo.deadline:
        parts.append(ansi.coral(f"-! {todo.deadline.strftime('%Y-%m-%d %H:%M')}"))
    if todo.weight > 1:
        parts.append(ansi.yellow("!" * (todo.weight - 1)))
    if counts is not None:
        done, total = counts
        glyph = progress_glyph(Progress(done, total).percent)
        parts.append(ansi.muted(f"{glyph} ({done}/{total})"))

    return " ".join(parts)


def format_tree(
    store: TodoStore,
    rows: list[TreeRow],
    indent: int = 3,
    numbered: bool = False,
    now: datetime | None = None,
) -> list[str]:
    """Render tree rows, optionally prefixed with 1-based pick numbers."""
    now = now or clock.now()
    lines = []
    for pos, row in enumerate(rows, start=1):
        todo = store.get(row.id)
        counts = None
        if not is_leaf(store, todo.id):
            p = progress(store, todo.id)
            counts = (p.done, p.total)
        line = f"{' ' * (indent * row.depth)}{BRANCH}{format_todo(todo, now, counts)}"
        lines.append(f"[{pos}] {line}" if numbered else line)
    return lines


def format_status(symbol: str, content: str, todo_id: int | None = None) -> str:
    """Format status message for action confirmations."""
    if todo_id is not None:
        return f"{symbol} {content} {ansi.muted(f'[{str(todo_id)[:8]}]')}"
    return f"{symbol} {content}"

from collections.abc import Iterator
from contextlib import contextmanager

from fncli import UsageError, cli

from . import config, version as _version
from .core.errors import TuffousError, ValidationError
from .core.models import Todo, create
from .lib.dates import parse_date, parse_datetime, parse_range
from .lib.errors import echo, exit_error
from .lib.format import format_status, format_tree
from .lib.parsing import parse_bool, parse_selection
from .query import Completion, Filter, View, apply, tree
from .selection import LinkCache
from .store import TodoStore, open_store

__all__ = ["apply_edits", "build_filter", "choose"]

CLEAR = "none"

_FILTER_KEYS = (
    "ftoday",
    "fdate",
    "fdate_range",
    "fddl",
    "fddl_range",
    "flogged",
    "fall",
    "ftag",
    "fname",
    "fkey",
    "fview",
    "fproject",
)
_FILTER_FLAGS = {"ftag": ["--ftag"], "fkey": ["--fkey"]}
_EDIT_FLAGS = {"tag": ["-t", "--tag"], "name": ["-n", "--name"], "details": ["-d", "--details"]}


# ── domain ───────────────────────────────────────────────────────────────────


def _date_arg(text: str, what: str):
    day = parse_date(text)
    if day is None:
        raise ValidationError(f"Invalid {what} '{text}'")
    return day


def _range_arg(text: str, what: str):
    try:
        return parse_range(text)
    except ValueError as e:
        raise ValidationError(f"Invalid {what}: {e}") from e


def build_filter(
    ftoday: bool = False,
    fdate: str | None = None,
    fdate_range: str | None = None,
    fddl: str | None = None,
    fddl_range: str | None = None,
    flogged: bool = False,
    fall: bool = False,
    ftag: list[str] | None = None,
    fname: str | None = None,
    fkey: list[str] | None = None,
    fview: str | None = None,
    fproject: int | None = None,
) -> Filter:
    """Turn command line filter options into a Filter. Raises ValidationError."""
    if flogged and fall:
        raise ValidationError("--flogged and --fall are mutually exclusive")
    completion = Completion.LOGGED if flogged else Completion.ALL if fall else None
    view = None
    if fview:
        try:
            view = View(fview.lower())
        except ValueError:
            choices = ", ".join(v.value for v in View)
            raise ValidationError(f"Unknown view '{fview}', expected one of: {choices}") from None
        if view is View.PROJECT and fproject is None:
            raise ValidationError("The project view needs a project id")
    return Filter(
        completion=completion,
        today=ftoday,
        scheduled=_date_arg(fdate, "date") if fdate else None,
        scheduled_range=_range_arg(fdate_range, "date range") if fdate_range else None,
        deadline=_date_arg(fddl, "deadline") if fddl else None,
        deadline_range=_range_arg(fddl_range, "deadline range") if fddl_range else None,
        tags=tuple(ftag or ()),
        name=fname,
        keywords=tuple(fkey or ()),
        view=view,
        project=fproject,
    )


def apply_edits(
    todo: Todo,
    name: str | None = None,
    details: str | None = None,
    date: str | None = None,
    ddl: str | None = None,
    weight: str | None = None,
    tag: list[str] | None = None,
    complete: str | None = None,
) -> None:
    """Apply command line edits to one todo. 'none' clears a date or deadline."""
    if complete is not None:
        try:
            todo.completed = parse_bool(complete)
        except ValueError as e:
            raise ValidationError(str(e)) from e
    if name is not None:
        todo.rename(name)
    if details is not None:
        todo.metadata.details = details
    if weight is not None:
        try:
            todo.set_weight(int(weight))
        except ValueError:
            raise ValidationError(f"Weight must be a positive integer, got '{weight}'") from None
    if ddl is not None:
        if ddl.strip().lower() == CLEAR:
            todo.deadline = None
        else:
            deadline = parse_datetime(ddl)
            if deadline is None:
                raise ValidationError(f"Invalid deadline '{ddl}'")
            todo.deadline = deadline
    if date is not None:
        todo.scheduled_date = None if date.strip().lower() == CLEAR else _date_arg(date, "date")
    for spec in tag or []:
        todo.toggle_tag(spec)


def choose(store: TodoStore, ids: list[int], pick: str | None, indent: int) -> list[int]:
    """Show the numbered tree of ids and return the picked todo ids."""
    rows = tree(store, ids)
    if not rows:
        echo("no todos match")
        return []
    echo(f"{len(rows)} todos:")
    for line in format_tree(store, rows, indent=indent, numbered=True):
        echo(line)
    if pick is None:
        try:
            pick = input("\nPlease enter your selection: ")
        except EOFError:
            pick = ""
    chosen: list[int] = []
    for pos in parse_selection(pick):
        if pos <= len(rows) and rows[pos - 1].id not in chosen:
            chosen.append(rows[pos - 1].id)
    return chosen


@contextmanager
def _session() -> Iterator[tuple[TodoStore, config.Config]]:
    root = config.resolve_root()
    cfg = config.Config(root)
    try:
        with open_store(root) as store:
            yield store, cfg
    except TuffousError as e:
        exit_error(str(e))


def _matches(store: TodoStore, cfg: config.Config, filters: dict) -> list[int]:
    try:
        flt = build_filter(**filters)
    except ValidationError as e:
        raise UsageError(str(e)) from e
    return apply(store, flt, cap=cfg.result_cap())


# ── cli ──────────────────────────────────────────────────────────────────────


@cli("tuffous")
def init() -> None:
    """Initialize a new todo store"""
    path = TodoStore(config.resolve_root()).init()
    echo(f"initialized {path}")


@cli("tuffous")
def version() -> None:
    """Show version"""
    echo(_version())


@cli("tuffous", flags=_EDIT_FLAGS)
def new(
    title: list[str],
    name: str | None = None,
    details: str | None = None,
    date: str | None = None,
    ddl: str | None = None,
    weight: str | None = None,
    tag: list[str] | None = None,
    complete: str | None = None,
) -> None:
    """Create a new todo"""
    title_str = " ".join(title) if title else ""
    if not title_str.strip():
        exit_error("Usage: tuffous new <title>")
    with _session() as (store, _):
        todo = create(title_str)
        apply_edits(todo, name, details, date, ddl, weight, tag, complete)
        store.add(todo)
        echo(format_status("□", todo.name, todo.id))


@cli("tuffous", name="list", flags=_FILTER_FLAGS)
def list_cmd(
    ftoday: bool = False,
    fdate: str | None = None,
    fdate_range: str | None = None,
    fddl: str | None = None,
    fddl_range: str | None = None,
    flogged: bool = False,
    fall: bool = False,
    ftag: list[str] | None = None,
    fname: str | None = None,
    fkey: list[str] | None = None,
    fview: str | None = None,
    fproject: int | None = None,
) -> None:
    """List todos matching filters"""
    filters = {k: v for k, v in locals().items() if k in _FILTER_KEYS}
    with _session() as (store, cfg):
        rows = tree(store, _matches(store, cfg, filters))
        if not rows:
            echo("no todos match")
            return
        echo(f"{len(rows)} todos:")
        for line in format_tree(store, rows, indent=cfg.indent()):
            echo(line)


@cli("tuffous", flags={**_FILTER_FLAGS, **_EDIT_FLAGS})
def edit(
    ftoday: bool = False,
    fdate: str | None = None,
    fdate_range: str | None = None,
    fddl: str | None = None,
    fddl_range: str | None = None,
    flogged: bool = False,
    fall: bool = False,
    ftag: list[str] | None = None,
    fname: str | None = None,
    fkey: list[str] | None = None,
    fview: str | None = None,
    fproject: int | None = None,
    pick: str | None = None,
    name: str | None = None,
    details: str | None = None,
    date: str | None = None,
    ddl: str | None = None,
    weight: str | None = None,
    tag: list[str] | None = None,
    complete: str | None = None,
) -> None:
    """Edit todos matching filters"""
    filters = {k: v for k, v in locals().items() if k in _FILTER_KEYS}
    with _session() as (store, cfg):
        for todo_id in choose(store, _matches(store, cfg, filters), pick, cfg.indent()):
            todo = store.get(todo_id)
            apply_edits(todo, name, details, date, ddl, weight, tag, complete)
            echo(format_status("✎", todo.name, todo.id))


@cli("tuffous", flags=_FILTER_FLAGS)
def complete(
    ftoday: bool = False,
    fdate: str | None = None,
    fdate_range: str | None = None,
    fddl: str | None = None,
    fddl_range: str | None = None,
    flogged: bool = False,
    fall: bool = False,
    ftag: list[str] | None = None,
    fname: str | None = None,
    fkey: list[str] | None = None,
    fview: str | None = None,
    fproject: int | None = None,
    pick: str | None = None,
) -> None:
    """Complete todos matching filters"""
    filters = {k: v for k, v in locals().items() if k in _FILTER_KEYS}
    with _session() as (store, cfg):
        for todo_id in choose(store, _matches(store, cfg, filters), pick, cfg.indent()):
            todo = store.get(todo_id)
            todo.completed = True
            echo(format_status("✓", todo.name, todo.id))


@cli("tuffous", flags=_FILTER_FLAGS)
def father(
    ftoday: bool = False,
    fdate: str | None = None,
    fdate_range: str | None = None,
    fddl: str | None = None,
    fddl_range: str | None = None,
    flogged: bool = False,
    fall: bool = False,
    ftag: list[str] | None = None,
    fname: str | None = None,
    fkey: list[str] | None = None,
    fview: str | None = None,
    fproject: int | None = None,
    pick: str | None = None,
) -> None:
    """Mark a todo as father in the link cache"""
    filters = {k: v for k, v in locals().items() if k in _FILTER_KEYS}
    with _session() as (store, cfg):
        cache = LinkCache.load(store.root)
        chosen = choose(store, _matches(store, cfg, filters), pick, cfg.indent())
        if chosen:
            cache.father = chosen[0]
        _process_cache(store, cache)


@cli("tuffous", flags=_FILTER_FLAGS)
def child(
    ftoday: bool = False,
    fdate: str | None = None,
    fdate_range: str | None = None,
    fddl: str | None = None,
    fddl_range: str | None = None,
    flogged: bool = False,
    fall: bool = False,
    ftag: list[str] | None = None,
    fname: str | None = None,
    fkey: list[str] | None = None,
    fview: str | None = None,
    fproject: int | None = None,
    pick: str | None = None,
) -> None:
    """Mark todos as children in the link cache"""
    filters = {k: v for k, v in locals().items() if k in _FILTER_KEYS}
    with _session() as (store, cfg):
        cache = LinkCache.load(store.root)
        cache.add_children(choose(store, _matches(store, cfg, filters), pick, cfg.indent()))
        _process_cache(store, cache)


def _process_cache(store: TodoStore, cache: LinkCache) -> None:
    father = store.find(cache.father) if cache.father is not None else None
    for child_id, linked in cache.process(store):
        arrow = "→" if linked else "↛"
        echo(f"{father.name if father else cache.father} {arrow} {store.get(child_id).name}")
    cache.write()


@cli("tuffous", flags=_FILTER_FLAGS)
def remove(
    ftoday: bool = False,
    fdate: str | None = None,
    fdate_range: str | None = None,
    fddl: str | None = None,
    fddl_range: str | None = None,
    flogged: bool = False,
    fall: bool = False,
    ftag: list[str] | None = None,
    fname: str | None = None,
    fkey: list[str] | None = None,
    fview: str | None = None,
    fproject: int | None = None,
    pick: str | None = None,
) -> None:
    """Remove todos matching filters"""
    filters = {k: v for k, v in locals().items() if k in _FILTER_KEYS}
    with _session() as (store, cfg):
        cache = LinkCache.load(store.root)
        for todo_id in choose(store, _matches(store, cfg, filters), pick, cfg.indent()):
            todo = store.get(todo_id)
            store.remove(todo_id)
            echo(format_status("✗", todo.name, todo_id))
        cache.clean()
        cache.write()


@cli("tuffous")
def cleancache() -> None:
    """Clear pending father/child picks"""
    cache = LinkCache.load(config.resolve_root())
    cache.clean()
    cache.write()
    echo("cache cleared")

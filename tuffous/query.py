"""Filter engine.

A todo that passes every predicate is an anchor. The result holds each
anchor, all of its ancestors (unfiltered, they give context), and those of
its descendants that pass the completion predicate alone, so the subtree
keeps its shape.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from . import config
from .core.models import EXCLUDE_MARK, Todo
from .graph import ancestors, children_index, descendants
from .lib import clock
from .store import TodoStore

__all__ = [
    "Completion",
    "DateRange",
    "Filter",
    "TreeRow",
    "View",
    "apply",
    "passes_completion",
    "tree",
]

logger = logging.getLogger(__name__)

DateRange = tuple[date | None, date | None]


class Completion(Enum):
    PENDING = "pending"
    LOGGED = "logged"
    ALL = "all"


class View(Enum):
    TODAY = "today"
    UPCOMING = "upcoming"
    ANYTIME = "anytime"
    LOGBOOK = "logbook"
    ALL = "all"
    PROJECT = "project"


@dataclass(frozen=True)
class Filter:
    completion: Completion | None = None
    today: bool = False
    scheduled: date | None = None
    scheduled_range: DateRange | None = None
    deadline: date | None = None
    deadline_range: DateRange | None = None
    tags: tuple[str, ...] = ()
    name: str | None = None
    keywords: tuple[str, ...] = ()
    view: View | None = None
    project: int | None = None

    @property
    def effective_completion(self) -> Completion:
        if self.completion is not None:
            return self.completion
        if self.view is View.LOGBOOK:
            return Completion.LOGGED
        return Completion.PENDING


def passes_completion(todo: Todo, flt: Filter) -> bool:
    state = flt.effective_completion
    if state is Completion.LOGGED:
        return todo.completed
    if state is Completion.PENDING:
        return not todo.completed
    return True


def _in_range(day: date, bounds: DateRange) -> bool:
    start, end = bounds
    if start is not None and day < start:
        return False
    return end is None or day <= end


def _tags_match(todo: Todo, wanted: tuple[str, ...]) -> bool:
    for spec in wanted:
        if spec.endswith(EXCLUDE_MARK) and len(spec) > len(EXCLUDE_MARK):
            if spec[: -len(EXCLUDE_MARK)] in todo.tags:
                return False
        elif spec.startswith(EXCLUDE_MARK) and len(spec) > len(EXCLUDE_MARK):
            if spec[len(EXCLUDE_MARK) :] in todo.tags:
                return False
        elif spec not in todo.tags:
            return False
    return True


def _keywords_match(todo: Todo, keywords: tuple[str, ...]) -> bool:
    haystack = [todo.name.lower(), todo.details.lower(), *(t.lower() for t in todo.tags)]
    return all(any(key.lower() in text for text in haystack) for key in keywords)


def _view_match(todo: Todo, view: View, today: date, scope: set[int] | None) -> bool:
    deadline = todo.deadline.date() if todo.deadline else None
    match view:
        case View.TODAY:
            if todo.scheduled_date:
                return todo.scheduled_date == today
            return deadline is not None and deadline <= today
        case View.UPCOMING:
            if todo.scheduled_date:
                return todo.scheduled_date != today
            return deadline is not None and deadline > today
        case View.ANYTIME:
            return todo.scheduled_date is None and todo.deadline is None
        case View.LOGBOOK:
            return todo.completed
        case View.PROJECT:
            return scope is not None and todo.id in scope
    return True


def _strict_match(todo: Todo, flt: Filter, today: date, scope: set[int] | None) -> bool:
    if flt.today and todo.scheduled_date != today:
        return False
    if flt.scheduled is not None and todo.scheduled_date != flt.scheduled:
        return False
    if flt.scheduled_range is not None and (
        todo.scheduled_date is None or not _in_range(todo.scheduled_date, flt.scheduled_range)
    ):
        return False
    deadline = todo.deadline.date() if todo.deadline else None
    if flt.deadline is not None and deadline != flt.deadline:
        return False
    if flt.deadline_range is not None and (
        deadline is None or not _in_range(deadline, flt.deadline_range)
    ):
        return False
    if flt.tags and not _tags_match(todo, flt.tags):
        return False
    if flt.name and flt.name.lower() not in todo.name.lower():
        return False
    if flt.keywords and not _keywords_match(todo, flt.keywords):
        return False
    return flt.view is None or _view_match(todo, flt.view, today, scope)


def _project_scope(
    store: TodoStore, flt: Filter, index: dict[int, list[int]]
) -> set[int] | None:
    if flt.view is not View.PROJECT or flt.project is None:
        return None
    return {flt.project, *descendants(store, flt.project, index)}


def matches(
    store: TodoStore, todo: Todo, flt: Filter, *, strict: bool = True, today: date | None = None
) -> bool:
    if not passes_completion(todo, flt):
        return False
    if not strict:
        return True
    scope = _project_scope(store, flt, children_index(store))
    return _strict_match(todo, flt, today or clock.today(), scope)


def apply(
    store: TodoStore,
    flt: Filter,
    *,
    today: date | None = None,
    cap: int = config.RESULT_CAP,
) -> list[int]:
    """Ids of the anchors plus their context, deduplicated, at most cap entries."""
    today = today or clock.today()
    index = children_index(store)
    scope = _project_scope(store, flt, index)
    order = {todo_id: pos for pos, todo_id in enumerate(store.all_ids())}

    result: dict[int, None] = {}
    for todo in store:
        if len(result) >= cap:
            logger.info("filter result reached the cap of %d, truncating", cap)
            break
        if not passes_completion(todo, flt) or not _strict_match(todo, flt, today, scope):
            continue
        result.setdefault(todo.id)
        for parent_id in sorted(ancestors(store, todo.id), key=order.__getitem__):
            result.setdefault(parent_id)
        for child_id in sorted(descendants(store, todo.id, index), key=order.__getitem__):
            if passes_completion(store.get(child_id), flt):
                result.setdefault(child_id)
    return list(result)[:cap]


@dataclass(frozen=True)
class TreeRow:
    id: int
    depth: int


def tree(store: TodoStore, result: list[int]) -> list[TreeRow]:
    """Lay a result set out as a forest, parents before children.

    Roots are members without a parent inside the result. A todo with two
    parents in the result is listed under both.
    """
    members = dict.fromkeys(todo_id for todo_id in result if todo_id in store)
    index = children_index(store)
    rows: list[TreeRow] = []
    for todo_id in members:
        if any(p in members for p in store.get(todo_id).parents):
            continue
        stack: list[tuple[int, int, frozenset[int]]] = [(todo_id, 0, frozenset())]
        while stack:
            node, depth, path = stack.pop()
            rows.append(TreeRow(node, depth))
            kids = [k for k in index.get(node, []) if k in members and k not in path]
            stack.extend((k, depth + 1, path | {node}) for k in reversed(kids))
    return rows

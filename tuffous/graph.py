"""Parent/child links between todos.

Links live on the child: ``todo.parents`` lists the ids it depends from.
A todo may have several parents, so the structure is a DAG, not a tree.
Traversals are iterative and keep a visited set, so even a store with a
corrupt cycle on disk cannot make them loop forever.
"""

import logging
from collections import deque

from .core.errors import LinkError, NotFoundError
from .store import TodoStore

__all__ = [
    "ancestors",
    "can_link",
    "children_index",
    "descendants",
    "direct_children",
    "is_leaf",
    "link",
    "link_problem",
    "toggle_link",
    "unlink",
]

logger = logging.getLogger(__name__)


def children_index(store: TodoStore) -> dict[int, list[int]]:
    """Map every parent id to its direct children, in store order."""
    index: dict[int, list[int]] = {}
    for todo in store:
        for parent_id in dict.fromkeys(todo.parents):
            index.setdefault(parent_id, []).append(todo.id)
    return index


def ancestors(store: TodoStore, todo_id: int) -> set[int]:
    """All parents, their parents, and so on. Unknown ids have none."""
    todo = store.find(todo_id)
    if todo is None:
        return set()
    seen: set[int] = set()
    stack = list(todo.parents)
    while stack:
        parent_id = stack.pop()
        if parent_id in seen:
            continue
        parent = store.find(parent_id)
        if parent is None:
            continue
        seen.add(parent_id)
        stack.extend(parent.parents)
    seen.discard(todo_id)
    return seen


def descendants(
    store: TodoStore, todo_id: int, index: dict[int, list[int]] | None = None
) -> set[int]:
    """Every todo that has todo_id among its ancestors."""
    index = children_index(store) if index is None else index
    seen: set[int] = set()
    q: deque[int] = deque(index.get(todo_id, []))
    while q:
        child_id = q.popleft()
        if child_id in seen:
            continue
        seen.add(child_id)
        q.extend(index.get(child_id, []))
    seen.discard(todo_id)
    return seen


def direct_children(store: TodoStore, todo_id: int) -> set[int]:
    return {todo.id for todo in store if todo_id in todo.parents}


def is_leaf(store: TodoStore, todo_id: int) -> bool:
    return not any(todo_id in todo.parents for todo in store)


def roots(store: TodoStore) -> list[int]:
    return [todo.id for todo in store if not todo.parents]


def link_problem(store: TodoStore, parent_id: int, child_id: int) -> str | None:
    """Why parent_id cannot become a parent of child_id, or None if it can."""
    if parent_id == child_id:
        return "a todo cannot be its own parent"
    if parent_id not in store or child_id not in store:
        return "unknown todo"
    if child_id in ancestors(store, parent_id):
        return "would create a cycle"
    if child_id in descendants(store, parent_id):
        return "already a descendant"
    return None


def can_link(store: TodoStore, parent_id: int, child_id: int) -> bool:
    return link_problem(store, parent_id, child_id) is None


def link(store: TodoStore, parent_id: int, child_id: int) -> None:
    for todo_id in (parent_id, child_id):
        if todo_id not in store:
            raise NotFoundError(todo_id, op="link")
    problem = link_problem(store, parent_id, child_id)
    if problem:
        raise LinkError(parent_id, child_id, problem)
    child = store.get(child_id)
    if parent_id not in child.parents:
        child.parents.append(parent_id)
        logger.debug("linked %s -> %s", parent_id, child_id)


def unlink(store: TodoStore, parent_id: int, child_id: int) -> bool:
    """Drop the parent_id link from child_id. Returns True if a link was removed."""
    child = store.find(child_id)
    if child is None:
        raise NotFoundError(child_id, op="unlink")
    if parent_id not in child.parents:
        return False
    child.parents = [p for p in child.parents if p != parent_id]
    logger.debug("unlinked %s -> %s", parent_id, child_id)
    return True


def toggle_link(store: TodoStore, parent_id: int, child_id: int) -> bool:
    """Unlink if linked, link otherwise. Returns True when the link now exists."""
    if unlink(store, parent_id, child_id):
        return False
    link(store, parent_id, child_id)
    return True

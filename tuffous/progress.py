"""Leaf-weight progress over a todo's subtree.

Only leaves carry weight. A parent's total is the sum of its children's
totals, so a leaf reachable along two paths counts twice, once per path.
"""

import logging
from dataclasses import dataclass

from .graph import children_index
from .store import TodoStore

__all__ = ["Progress", "progress", "progress_glyph", "weight"]

logger = logging.getLogger(__name__)

_GLYPHS = "·▁▂▃▄▅▆▇█"


def weight(store: TodoStore, todo_id: int, only_completed: bool = False) -> int:
    store.get(todo_id)
    index = children_index(store)

    def counts(child_id: int) -> bool:
        return store.get(child_id).completed or not only_completed

    memo: dict[int, int] = {}
    on_path: set[int] = set()
    stack: list[tuple[int, bool]] = [(todo_id, False)]
    while stack:
        node, expanded = stack.pop()
        if node in memo:
            continue
        kids = index.get(node, [])
        if not expanded:
            on_path.add(node)
            stack.append((node, True))
            for kid in kids:
                if kid in on_path:
                    logger.warning("cycle through %s while weighing %s", kid, todo_id)
                elif kid not in memo and counts(kid):
                    stack.append((kid, False))
            continue
        on_path.discard(node)
        if kids:
            memo[node] = sum(memo.get(kid, 0) for kid in kids if counts(kid))
        else:
            memo[node] = store.get(node).weight if counts(node) else 0
    return memo[todo_id]


@dataclass(frozen=True)
class Progress:
    done: int
    total: int

    @property
    def ratio(self) -> float | None:
        """Completed share of the subtree, or None when there is nothing to measure."""
        if self.total == 0:
            return None
        return self.done / self.total

    @property
    def percent(self) -> int | None:
        if self.total == 0:
            return None
        return self.done * 100 // self.total

    @property
    def is_done(self) -> bool:
        return self.total > 0 and self.done == self.total


def progress(store: TodoStore, todo_id: int) -> Progress:
    return Progress(done=weight(store, todo_id, True), total=weight(store, todo_id, False))


def progress_glyph(percent: int | None) -> str:
    if percent is None:
        return _GLYPHS[0]
    if not 0 <= percent <= 100:
        raise ValueError(f"percent out of range: {percent}")
    return _GLYPHS[(percent * 8 + 99) // 100]

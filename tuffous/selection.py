"""Pending father/child picks kept between two separate commands.

`tuffous father` records one todo, `tuffous child` records one or more;
once both sides are known the links are toggled and the cache is emptied.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from . import config
from .graph import toggle_link
from .store import TodoStore

__all__ = ["LinkCache"]

logger = logging.getLogger(__name__)


@dataclass
class LinkCache:
    path: Path
    father: int | None = None
    children: list[int] = field(default_factory=list)

    @classmethod
    def load(cls, root: Path) -> "LinkCache":
        path = config.cache_path(root)
        if not path.exists():
            return cls(path)
        try:
            data = json.loads(path.read_text())
            father = data.get("father")
            return cls(
                path,
                father=int(father) if father is not None else None,
                children=[int(c) for c in data.get("child") or []],
            )
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("discarding unreadable link cache %s: %s", path, e)
            return cls(path)

    def write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"father": self.father, "child": self.children}))

    def clean(self) -> None:
        self.father = None
        self.children = []

    @property
    def ready(self) -> bool:
        return self.father is not None and bool(self.children)

    def add_children(self, todo_ids: list[int]) -> None:
        self.children.extend(i for i in todo_ids if i not in self.children)

    def process(self, store: TodoStore) -> list[tuple[int, bool]]:
        """Toggle father->child for every pending child once both sides are set.

        Returns (child_id, linked) pairs. Ids that vanished from the store
        are skipped. A LinkError leaves the cache untouched.
        """
        father = self.father
        if father is None or not self.children:
            return []
        if father not in store:
            logger.info("pending father %s no longer exists, clearing cache", father)
            self.clean()
            return []
        changes = [
            (child_id, toggle_link(store, father, child_id))
            for child_id in self.children
            if child_id in store
        ]
        self.clean()
        return changes

import json
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path

from . import config
from .core.errors import ConflictError, NotFoundError, StoreError
from .core.models import Todo
from .lib.converters import TodoRecord, record_to_todo, todo_to_record

__all__ = ["TodoStore", "open_store"]

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"
DUPLICATE_SUFFIX = ".dup"


class TodoStore:
    """
    All todos of one store directory, keyed by id.

    Layout: <root>/.tuffous/todos/<id>.json, one record per file.
    The store is the only owner of the Todo objects it hands out; callers
    mutate them in place and call persist_all() when done.
    """

    def __init__(self, root: Path | str | None = None) -> None:
        self.root = config.resolve_root(root)
        self._todos: dict[int, Todo] = {}

    def __contains__(self, todo_id: object) -> bool:
        return todo_id in self._todos

    def __len__(self) -> int:
        return len(self._todos)

    def __iter__(self) -> Iterator[Todo]:
        return iter(list(self._todos.values()))

    @property
    def todos_dir(self) -> Path:
        return config.todos_dir(self.root)

    def is_initialized(self) -> bool:
        return self.todos_dir.is_dir()

    def init(self) -> Path:
        """Create the store directories; an existing store is left alone."""
        self.todos_dir.mkdir(parents=True, exist_ok=True)
        return self.todos_dir

    def _record_path(self, todo_id: int) -> Path:
        return self.todos_dir / f"{todo_id}{RECORD_SUFFIX}"

    # ── load / persist ───────────────────────────────────────────────────────

    def load_all(self) -> int:
        """Replace the in-memory set with every readable record on disk.

        Unreadable or malformed files are skipped, never fatal. A second file
        holding an id already loaded is renamed to *.json.dup.
        """
        if not self.is_initialized():
            raise StoreError(f"no todo store at {self.root}, run 'tuffous init' first")

        loaded: dict[int, Todo] = {}
        sources: dict[int, Path] = {}
        skipped = 0
        for path in sorted(self.todos_dir.iterdir()):
            if not path.is_file() or path.suffix != RECORD_SUFFIX:
                continue
            todo = _read_record(path)
            if todo is None:
                skipped += 1
                continue
            if todo.id in loaded:
                # persist_all only ever rewrites <id>.json, so that file wins
                stale = sources[todo.id]
                if path == self._record_path(todo.id):
                    loaded[todo.id], sources[todo.id] = todo, path
                else:
                    stale = path
                logger.warning("duplicate todo id %s, setting %s aside", todo.id, stale.name)
                _set_aside(stale)
                skipped += 1
                continue
            loaded[todo.id] = todo
            sources[todo.id] = path

        self._todos = loaded
        logger.debug("loaded %d todos from %s (%d skipped)", len(loaded), self.todos_dir, skipped)
        return len(loaded)

    def persist(self, todo: Todo) -> bool:
        """Write one record; replaces the file only once the new content is complete."""
        path = self._record_path(todo.id)
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(todo_to_record(todo)))
            os.replace(tmp, path)
        except OSError as e:
            logger.error("failed to write todo %s to %s: %s", todo.id, path, e)
            tmp.unlink(missing_ok=True)
            return False
        return True

    def persist_all(self) -> list[int]:
        """Write every record. Returns the ids that could not be written."""
        self.init()
        failed = [todo.id for todo in self._todos.values() if not self.persist(todo)]
        logger.debug("persisted %d todos", len(self._todos) - len(failed))
        return failed

    # ── lookup ───────────────────────────────────────────────────────────────

    def find(self, todo_id: int) -> Todo | None:
        return self._todos.get(todo_id)

    def get(self, todo_id: int) -> Todo:
        todo = self._todos.get(todo_id)
        if todo is None:
            raise NotFoundError(todo_id, op="get")
        return todo

    get_mut = get

    def all_ids(self) -> list[int]:
        return list(self._todos)

    def snapshot(self) -> dict[int, TodoRecord]:
        return {todo_id: todo_to_record(todo) for todo_id, todo in self._todos.items()}

    # ── mutation ─────────────────────────────────────────────────────────────

    def add(self, todo: Todo) -> Todo:
        if todo.id in self._todos:
            raise ConflictError(f"todo id {todo.id} already exists")
        self._todos[todo.id] = todo
        return todo

    def remove(self, todo_id: int) -> None:
        """Drop a todo and its file, then repair links that pointed at it."""
        self._todos.pop(todo_id, None)
        self.refresh()
        try:
            self._record_path(todo_id).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("could not delete record for %s: %s", todo_id, e)

    def refresh(self, today: date | None = None):
        from .integrity import refresh

        return refresh(self, today=today)


def _read_record(path: Path) -> Todo | None:
    try:
        record = json.loads(path.read_text())
        return record_to_todo(record)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("skipping unreadable record %s: %s", path, e)
    except (KeyError, ValueError, TypeError) as e:
        logger.warning("skipping malformed record %s: %s", path, e)
    return None


def _set_aside(path: Path) -> None:
    try:
        path.rename(path.with_name(path.name + DUPLICATE_SUFFIX))
    except OSError as e:
        logger.warning("could not set aside %s: %s", path, e)


@contextmanager
def open_store(root: Path | str | None = None, *, refresh: bool = True):
    """Load (and refresh) a store; persist it when the block exits cleanly."""
    store = TodoStore(root)
    store.load_all()
    if refresh:
        store.refresh()
    yield store
    store.persist_all()

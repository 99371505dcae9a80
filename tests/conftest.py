from datetime import date, datetime

import fncli
import pytest

from tuffous.core.models import Todo, create
from tuffous.graph import link
from tuffous.lib import ansi, clock
from tuffous.store import TodoStore

NOW = datetime(2025, 6, 11, 9, 30)
TODAY = NOW.date()


class FnCLIRunner:
    def invoke(self, args: list[str]):
        import tuffous.todos  # noqa: F401

        return fncli.invoke(["tuffous", *args])


def add_todo(
    store: TodoStore,
    name: str,
    *parents: Todo,
    completed: bool = False,
    tags: tuple[str, ...] = (),
    weight: int = 1,
    details: str = "",
    scheduled: date | None = None,
    deadline: datetime | None = None,
) -> Todo:
    todo = create(name)
    todo.completed = completed
    todo.metadata.details = details
    todo.scheduled_date = scheduled
    todo.deadline = deadline
    todo.set_weight(weight)
    for tag in tags:
        todo.add_tag(tag)
    store.add(todo)
    for parent in parents:
        link(store, parent.id, todo.id)
    return todo


@pytest.fixture(autouse=True)
def plain_output():
    ansi.use(ansi.PLAIN)
    yield
    ansi.use(ansi.DEFAULT)


@pytest.fixture(autouse=True)
def frozen_clock(monkeypatch):
    monkeypatch.setattr(clock, "now", lambda: NOW)
    monkeypatch.setattr(clock, "today", lambda: TODAY)
    return NOW


@pytest.fixture
def tmp_root(tmp_path, monkeypatch):
    monkeypatch.setenv("TUFFOUS_ROOT", str(tmp_path))
    monkeypatch.delenv("TUFFOUS_LOG", raising=False)
    return tmp_path


@pytest.fixture
def store(tmp_root):
    s = TodoStore(tmp_root)
    s.init()
    return s

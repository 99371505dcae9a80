import json
import os

import pytest

from tests.conftest import add_todo
from tuffous.core.errors import ConflictError, NotFoundError, StoreError
from tuffous.store import TodoStore, open_store


def test_load_requires_init(tmp_path):
    with pytest.raises(StoreError, match="tuffous init"):
        TodoStore(tmp_path).load_all()


def test_init_is_idempotent(tmp_path):
    s = TodoStore(tmp_path)
    path = s.init()
    assert path == tmp_path / ".tuffous" / "todos"
    assert s.init() == path
    assert s.is_initialized()


def test_persist_writes_one_file_per_todo(store):
    a = add_todo(store, "a")
    b = add_todo(store, "b")
    assert store.persist_all() == []
    names = sorted(p.name for p in store.todos_dir.iterdir())
    assert names == sorted([f"{a.id}.json", f"{b.id}.json"])
    record = json.loads((store.todos_dir / f"{a.id}.json").read_text())
    assert record["metadata"]["name"] == "a"


def test_round_trip_reproduces_set(store, tmp_root):
    parent = add_todo(store, "parent", tags=("x",), weight=2)
    add_todo(store, "child", parent, details="d", completed=True)
    store.persist_all()

    fresh = TodoStore(tmp_root)
    assert fresh.load_all() == 2
    assert fresh.snapshot() == store.snapshot()


def test_load_skips_bad_files(store, tmp_root, caplog):
    good = add_todo(store, "good")
    store.persist_all()
    (store.todos_dir / "garbage.json").write_text("{not json")
    (store.todos_dir / "partial.json").write_text(json.dumps({"completed": True}))
    (store.todos_dir / "notes.txt").write_text("ignored")

    fresh = TodoStore(tmp_root)
    assert fresh.load_all() == 1
    assert good.id in fresh
    assert "garbage.json" in caplog.text
    assert "partial.json" in caplog.text
    assert "notes.txt" not in caplog.text


def test_load_accepts_legacy_keys(store, tmp_root):
    parent = add_todo(store, "parent")
    store.persist_all()
    record = {
        "id": 42,
        "completed": False,
        "creation_date": "2025-06-01T08:00:00",
        "deadline": None,
        "time": "2025-06-20",
        "dependents": [parent.id],
        "tags": [],
        "weight": 1,
        "metadata": {"name": "legacy", "details": ""},
    }
    (store.todos_dir / "42.json").write_text(json.dumps(record))

    fresh = TodoStore(tmp_root)
    fresh.load_all()
    legacy = fresh.get(42)
    assert legacy.parents == [parent.id]
    assert legacy.scheduled_date.isoformat() == "2025-06-20"


def test_lookup(store):
    todo = add_todo(store, "here")
    assert store.get(todo.id) is todo
    assert store.get_mut(todo.id) is todo
    assert store.find(123) is None
    assert 123 not in store
    with pytest.raises(NotFoundError):
        store.get(123)


def test_all_ids_in_insertion_order(store):
    ids = [add_todo(store, name).id for name in ("one", "two", "three")]
    assert store.all_ids() == ids
    assert len(store) == 3


def test_add_duplicate_id_conflicts(store):
    todo = add_todo(store, "dup")
    with pytest.raises(ConflictError):
        store.add(todo)


def test_remove_drops_file_and_links(store):
    parent = add_todo(store, "parent")
    child = add_todo(store, "child", parent)
    store.persist_all()

    store.remove(parent.id)

    assert parent.id not in store
    assert child.parents == []
    assert not (store.todos_dir / f"{parent.id}.json").exists()


def test_remove_unknown_is_noop(store):
    add_todo(store, "stay")
    store.remove(999)
    assert len(store) == 1


def test_failed_write_reported(store, monkeypatch):
    todo = add_todo(store, "stuck")

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", boom)
    assert store.persist_all() == [todo.id]
    assert list(store.todos_dir.iterdir()) == []


def test_open_store_persists_on_exit(store, tmp_root):
    with open_store(tmp_root) as s:
        todo = add_todo(s, "kept")
    assert (store.todos_dir / f"{todo.id}.json").exists()


def test_open_store_discards_on_error(store, tmp_root):
    with pytest.raises(RuntimeError):
        with open_store(tmp_root) as s:
            add_todo(s, "lost")
            raise RuntimeError("boom")
    assert list(store.todos_dir.iterdir()) == []


def test_open_store_refreshes(store, tmp_root):
    orphan = add_todo(store, "orphan")
    orphan.parents.append(555)
    store.persist_all()

    with open_store(tmp_root) as s:
        assert s.get(orphan.id).parents == []


def test_duplicate_file_set_aside(store, tmp_root, caplog):
    todo = add_todo(store, "twin")
    store.persist_all()
    record = (store.todos_dir / f"{todo.id}.json").read_text()
    (store.todos_dir / "copy.json").write_text(record)

    fresh = TodoStore(tmp_root)
    assert fresh.load_all() == 1
    assert "duplicate todo id" in caplog.text
    assert not (store.todos_dir / "copy.json").exists()
    assert (store.todos_dir / "copy.json.dup").exists()
    assert (store.todos_dir / f"{todo.id}.json").exists()

    caplog.clear()
    assert TodoStore(tmp_root).load_all() == 1
    assert "duplicate" not in caplog.text


def test_record_named_by_id_wins_over_earlier_duplicate(store, tmp_root):
    todo = add_todo(store, "twin")
    store.persist_all()
    path = store.todos_dir / f"{todo.id}.json"
    stale = json.loads(path.read_text())
    stale["metadata"]["name"] = "stale twin"
    (store.todos_dir / "0-old.json").write_text(json.dumps(stale))

    fresh = TodoStore(tmp_root)
    fresh.load_all()
    assert fresh.get(todo.id).name == "twin"
    assert (store.todos_dir / "0-old.json.dup").exists()

from datetime import datetime, timedelta

from tests.conftest import TODAY, add_todo
from tuffous.graph import ancestors, descendants
from tuffous.progress import weight
from tuffous.query import Filter, apply
from tuffous.store import TodoStore, open_store


def test_graph_survives_reload(store, tmp_root):
    home = add_todo(store, "Home", tags=("house",))
    paint = add_todo(store, "Paint walls", home, weight=3)
    buy = add_todo(store, "Buy paint", paint, completed=True, scheduled=TODAY)
    tape = add_todo(store, "Buy tape", paint, deadline=datetime(2025, 6, 20, 12, 0))
    assert store.persist_all() == []

    with open_store(tmp_root) as fresh:
        assert fresh.snapshot() == store.snapshot()
        assert descendants(fresh, home.id) == {paint.id, buy.id, tape.id}
        assert ancestors(fresh, tape.id) == {home.id, paint.id}
        assert weight(fresh, home.id) == 2
        assert weight(fresh, paint.id, only_completed=True) == 1
        assert weight(fresh, home.id, only_completed=True) == 0
        result = apply(fresh, Filter(name="tape"))
        assert result[0] == tape.id
        assert set(result) == {tape.id, home.id, paint.id}


def test_reload_repairs_and_settles(store, tmp_root):
    gone = add_todo(store, "gone")
    stale = add_todo(store, "stale", gone, scheduled=TODAY - timedelta(days=2))
    store.persist_all()
    (store.todos_dir / f"{gone.id}.json").unlink()

    with open_store(tmp_root):
        pass

    first = TodoStore(tmp_root)
    first.load_all()
    assert first.get(stale.id).parents == []
    assert first.get(stale.id).scheduled_date == TODAY
    assert not first.refresh().changed

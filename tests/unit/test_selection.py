import json

import pytest

from tests.conftest import add_todo
from tuffous.core.errors import LinkError
from tuffous.selection import LinkCache


def test_load_missing(tmp_root):
    cache = LinkCache.load(tmp_root)
    assert cache.father is None
    assert cache.children == []
    assert not cache.ready


def test_write_and_load(tmp_root):
    cache = LinkCache.load(tmp_root)
    cache.father = 1
    cache.add_children([2, 3, 2])
    cache.write()
    data = json.loads((tmp_root / ".tuffous" / "cache.json").read_text())
    assert data == {"father": 1, "child": [2, 3]}
    again = LinkCache.load(tmp_root)
    assert again.father == 1
    assert again.children == [2, 3]
    assert again.ready


def test_unreadable_cache_discarded(tmp_root):
    path = tmp_root / ".tuffous" / "cache.json"
    path.parent.mkdir(parents=True)
    path.write_text("[1, 2")
    assert LinkCache.load(tmp_root).father is None


def test_process_waits_for_both_sides(store):
    father = add_todo(store, "father")
    cache = LinkCache.load(store.root)
    cache.father = father.id
    assert cache.process(store) == []
    assert cache.father == father.id


def test_process_toggles_links(store):
    father = add_todo(store, "father")
    kid = add_todo(store, "kid")
    cache = LinkCache.load(store.root)
    cache.father = father.id
    cache.add_children([kid.id, 999])

    assert cache.process(store) == [(kid.id, True)]
    assert kid.parents == [father.id]
    assert cache.father is None and cache.children == []

    cache.father = father.id
    cache.add_children([kid.id])
    assert cache.process(store) == [(kid.id, False)]
    assert kid.parents == []


def test_process_drops_vanished_father(store):
    kid = add_todo(store, "kid")
    cache = LinkCache.load(store.root)
    cache.father = 12345
    cache.add_children([kid.id])
    assert cache.process(store) == []
    assert not cache.ready


def test_process_rejects_cycles(store):
    top = add_todo(store, "top")
    low = add_todo(store, "low", top)
    cache = LinkCache.load(store.root)
    cache.father = low.id
    cache.add_children([top.id])
    with pytest.raises(LinkError):
        cache.process(store)
    assert cache.ready

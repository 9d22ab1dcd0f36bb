import gc
from dataclasses import dataclass

import pytest

from pommikit.memory import Cache


@dataclass
class CacheItem:
    id: int
    value: str


def test_cache_set_and_collect():
    c = Cache()
    items = []
    for i in range(1, 11):
        item = CacheItem(id=i, value="test")
        items.append(item)
        c.set(str(i), item)

    v = c.get("10")
    assert v is not None
    assert v.id == 10

    v = c.get("1")
    assert v is not None
    del items
    del item
    # The strong reference held by v keeps the value alive.
    gc.collect()
    assert v.id == 1
    assert v.value == "test"

    del v
    gc.collect()
    assert c.get("1") is None


def test_count_and_len():
    c = Cache()
    items = [CacheItem(i, "x") for i in range(5)]
    for item in items:
        c.set(str(item.id), item)
    assert c.count() == 5
    assert len(c) == 5


def test_delete():
    c = Cache()
    item = CacheItem(1, "x")
    c.set("a", item)
    c.delete("a")
    assert c.get("a") is None
    assert c.count() == 0


def test_delete_missing_key_is_harmless():
    c = Cache()
    item = CacheItem(1, "x")
    c.set("a", item)
    c.delete("missing")
    assert c.count() == 1


def test_missing_key():
    c = Cache()
    assert c.get("nope") is None


def test_dead_entry_removed_on_get():
    c = Cache()
    item = CacheItem(1, "x")
    c.set("a", item)
    del item
    gc.collect()
    assert c.count() == 1
    assert c.get("a") is None
    assert c.count() == 0


def test_set_overwrites():
    c = Cache()
    first = CacheItem(1, "first")
    second = CacheItem(2, "second")
    c.set("k", first)
    c.set("k", second)
    assert c.get("k") is second
    assert c.count() == 1


def test_value_must_support_weak_references():
    c = Cache()
    with pytest.raises(TypeError):
        c.set("k", 1)
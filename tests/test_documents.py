"""Tests for the path-addressed document store backends."""

import pytest

from lutobot.store import InMemoryDocumentStore, SQLiteDocumentStore, StoreError
from lutobot.store.documents import split_path


@pytest.fixture(params=["memory", "sqlite"])
def doc_store(request, tmp_path):
    if request.param == "memory":
        s = InMemoryDocumentStore()
    else:
        s = SQLiteDocumentStore(str(tmp_path / "docs.db"))
    yield s
    s.close()


def test_split_path():
    assert split_path("/recipes/42/") == ["recipes", "42"]
    with pytest.raises(StoreError):
        split_path("//")


@pytest.mark.asyncio
async def test_set_and_get_nested(doc_store):
    await doc_store.set("recipes/adobo", {"title": "Adobo"})
    await doc_store.set("recipes/flan", {"title": "Flan"})

    assert await doc_store.get("recipes/adobo") == {"title": "Adobo"}
    assert await doc_store.get("recipes/adobo/title") == "Adobo"
    assert set(await doc_store.get("recipes")) == {"adobo", "flan"}


@pytest.mark.asyncio
async def test_missing_path_is_none(doc_store):
    assert await doc_store.get("recipes/nothing") is None
    assert await doc_store.exists("recipes/nothing") is False


@pytest.mark.asyncio
async def test_set_replaces_subtree(doc_store):
    await doc_store.set("steps/r1", {"s1": {"number": 1}, "s2": {"number": 2}})
    await doc_store.set("steps/r1", {"s3": {"number": 3}})
    assert await doc_store.get("steps/r1") == {"s3": {"number": 3}}


@pytest.mark.asyncio
async def test_delete(doc_store):
    await doc_store.set("substitutes/i1", ["tamari"])
    await doc_store.set("substitutes/i2", ["bok choy"])
    await doc_store.delete("substitutes/i1")

    assert await doc_store.get("substitutes/i1") is None
    assert await doc_store.get("substitutes/i2") == ["bok choy"]


@pytest.mark.asyncio
async def test_invalid_path_raises(doc_store):
    with pytest.raises(StoreError):
        await doc_store.get("")


@pytest.mark.asyncio
async def test_memory_store_copies_values():
    s = InMemoryDocumentStore()
    value = {"title": "Adobo", "tags": ["savory"]}
    await s.set("recipes/a", value)
    value["tags"].append("mutated")

    got = await s.get("recipes/a")
    got["title"] = "changed"
    assert await s.get("recipes/a") == {"title": "Adobo", "tags": ["savory"]}


@pytest.mark.asyncio
async def test_sqlite_persists_across_instances(tmp_path):
    path = str(tmp_path / "persist.db")
    await SQLiteDocumentStore(path).set("userPreferences/u1", {"skill_level": "beginner"})

    reopened = SQLiteDocumentStore(path)
    assert await reopened.get("userPreferences/u1") == {"skill_level": "beginner"}
    assert reopened.collection_names() == ["userPreferences"]


@pytest.mark.asyncio
async def test_sqlite_empty_collection_removed(tmp_path):
    s = SQLiteDocumentStore(str(tmp_path / "gc.db"))
    await s.set("recipes/a", {"title": "A"})
    await s.delete("recipes/a")
    assert s.collection_names() == []


@pytest.mark.asyncio
async def test_sqlite_rejects_unserializable(tmp_path):
    s = SQLiteDocumentStore(str(tmp_path / "bad.db"))
    with pytest.raises(StoreError):
        await s.set("recipes/a", {"when": object()})


def test_sqlite_creates_parent_dir(tmp_path):
    SQLiteDocumentStore(str(tmp_path / "nested" / "dir" / "x.db"))
    assert (tmp_path / "nested" / "dir" / "x.db").exists()

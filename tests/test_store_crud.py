import threading

import pytest

from jotbook.errors import NoteNotFound, NoteValidationError
from jotbook.models import NoteUpdate
from jotbook.store import NoteStore


def test_groceries_scenario(store):
    n = store.create("Groceries", "Buy milk", ["home"])
    assert [x.title for x in store.list()] == ["Groceries"]

    store.update(n.id, NoteUpdate(body="Buy milk and eggs"))
    got = store.get(n.id)
    assert got.body == "Buy milk and eggs"
    assert got.title == "Groceries"

    store.delete(n.id)
    assert store.list() == []


def test_create_persists_before_returning(store, notes_path):
    n = store.create("hello", "world", ["Work", "ideas", "work"])
    assert n.tags == ["work", "ideas"]
    assert notes_path.exists()
    assert NoteStore(notes_path).load() == [n]


def test_ids_are_unique(store):
    ids = {store.create(f"note {i}").id for i in range(50)}
    assert len(ids) == 50


def test_list_keeps_insertion_order(store):
    titles = ["gamma", "alpha", "beta"]
    for t in titles:
        store.create(t)
    assert [n.title for n in store.list()] == titles
    # order survives a reload
    assert [n.title for n in NoteStore(store.path).load()] == titles


def test_update_is_partial_and_bumps_updated_at(store):
    n = store.create("draft", "hello", ["temp"])
    updated = store.update(n.id, NoteUpdate(title="X"))
    assert updated.title == "X"
    assert updated.body == "hello"
    assert updated.tags == ["temp"]
    assert updated.created_at == n.created_at
    assert updated.created_at <= updated.updated_at
    assert updated.updated_at >= n.updated_at

    again = store.update(n.id, NoteUpdate(tags=["Work", "ideas"]))
    assert again.tags == ["work", "ideas"]
    assert again.title == "X"
    assert again.updated_at >= updated.updated_at


def test_update_rejects_empty_title_and_keeps_note(store):
    n = store.create("keep me")
    with pytest.raises(NoteValidationError):
        store.update(n.id, NoteUpdate(title="  "))
    assert store.get(n.id).title == "keep me"


def test_missing_ids_raise_not_found(store):
    with pytest.raises(NoteNotFound):
        store.get("nope")
    with pytest.raises(NoteNotFound):
        store.update("nope", NoteUpdate(title="x"))
    with pytest.raises(NoteNotFound):
        store.delete("nope")


def test_delete_then_get_is_not_found(store):
    a = store.create("a")
    b = store.create("b")
    removed = store.delete(a.id)
    assert removed.id == a.id
    with pytest.raises(NoteNotFound):
        store.get(a.id)
    assert store.list() == [b]


def test_get_by_index(store):
    a = store.create("a")
    store.create("b")
    assert store.get_by_index(0) == a
    with pytest.raises(NoteNotFound):
        store.get_by_index(2)
    with pytest.raises(NoteNotFound):
        store.get_by_index(-1)


def test_concurrent_creates_are_all_kept(store):
    def worker(k):
        for i in range(10):
            store.create(f"t{k}-{i}")

    threads = [threading.Thread(target=worker, args=(k,)) for k in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.count == 50
    assert len(NoteStore(store.path).load()) == 50


def test_import_notes_writes_once(store, monkeypatch):
    from jotbook import storage

    calls = []
    real = storage.write_notes
    monkeypatch.setattr(storage, "write_notes", lambda p, n: (calls.append(1), real(p, n)))

    created = store.import_notes([
        {"title": "one", "body": "1", "tags": ["A"]},
        {"title": "two", "content": "legacy body"},
    ])
    assert [n.title for n in created] == ["one", "two"]
    assert created[0].tags == ["a"]
    assert created[1].body == "legacy body"
    assert len(calls) == 1
    assert store.count == 2


def test_import_rejects_bad_record_without_writing(store):
    store.create("existing")
    with pytest.raises(NoteValidationError):
        store.import_notes([{"title": "ok"}, {"title": ""}])
    assert [n.title for n in store.list()] == ["existing"]

from jotbook.models import NoteUpdate


def _seed(store):
    a = store.create("Team Meeting Notes", "agenda and roadmap", ["work"])
    b = store.create("Groceries", "Buy milk", ["Home"])
    c = store.create("Ideas", "a meeting of minds", ["work", "ideas"])
    return a, b, c


def test_empty_query_matches_all(store):
    notes = _seed(store)
    assert store.search("") == list(notes)


def test_no_match_is_empty_list(store):
    _seed(store)
    assert store.search("xyz") == []


def test_search_is_case_insensitive_over_title_and_body(store):
    a, b, c = _seed(store)
    assert store.search("Meeting") == [a, c]
    assert store.search("MILK") == [b]


def test_search_also_matches_tags(store):
    a, b, c = _seed(store)
    assert store.search("ideas") == [c]
    assert store.search("home") == [b]


def test_filter_by_tag_is_case_insensitive(store):
    a, b, c = _seed(store)
    assert store.filter_by_tag("work") == [a, c]
    assert store.filter_by_tag("WORK") == [a, c]
    assert store.filter_by_tag("wor") == []
    assert store.filter_by_tag("home") == [b]


def test_search_sees_updates(store):
    a, _, _ = _seed(store)
    store.update(a.id, NoteUpdate(title="Standup"))
    assert [n.title for n in store.search("standup")] == ["Standup"]


def test_tags_and_stats(store):
    assert store.stats() == {"total_notes": 0, "total_tags": 0, "last_updated": None}
    _, _, c = _seed(store)
    assert store.tags() == ["home", "ideas", "work"]
    stats = store.stats()
    assert stats["total_notes"] == 3
    assert stats["total_tags"] == 3
    assert stats["last_updated"] == c.updated_at

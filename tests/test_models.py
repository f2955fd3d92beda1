import pytest

from jotbook.errors import NoteValidationError
from jotbook.models import Note, NoteUpdate, normalize_tags, parse_tags


def test_new_note_sets_id_and_equal_timestamps():
    n = Note.new("  hello ", "world", ["Work", "ideas", "work", " "])
    assert n.id
    assert n.title == "hello"
    assert n.tags == ["work", "ideas"]
    assert n.created_at == n.updated_at
    assert n.created_at.tzinfo is not None


def test_empty_title_is_rejected():
    with pytest.raises(NoteValidationError):
        Note.new("   ", "body")


def test_parse_tags_from_csv():
    assert parse_tags("work, Ideas,,work") == ["work", "ideas"]
    assert parse_tags(None) == []
    assert normalize_tags(None) == []


def test_apply_only_touches_supplied_fields():
    n = Note.new("draft", "hello", ["temp"])
    changed = n.apply(NoteUpdate(title="final"))
    assert changed.title == "final"
    assert changed.body == "hello"
    assert changed.tags == ["temp"]
    assert changed.id == n.id
    assert changed.created_at == n.created_at
    assert changed.updated_at >= n.updated_at
    # original is left alone
    assert n.title == "draft"


def test_update_is_empty():
    assert NoteUpdate().is_empty()
    assert not NoteUpdate(body="").is_empty()


def test_matches_and_has_tag_are_case_insensitive():
    n = Note.new("Team Meeting Notes", "Discuss roadmap", ["Work"])
    assert n.matches("meeting")
    assert n.matches("ROADMAP")
    assert n.matches("wor")
    assert n.matches("")
    assert not n.matches("xyz")
    assert n.has_tag("WORK")
    assert not n.has_tag("wor")

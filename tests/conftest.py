import pytest

from jotbook.store import NoteStore


@pytest.fixture
def notes_path(tmp_path):
    return tmp_path / "data" / "notes.json"


@pytest.fixture
def store(notes_path):
    s = NoteStore(notes_path)
    s.load()
    return s

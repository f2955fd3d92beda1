from __future__ import annotations
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional
from uuid import uuid4

from . import storage
from .errors import NoteNotFound, NoteValidationError
from .models import Note, NoteUpdate, normalize_tags, parse_tags

logger = logging.getLogger(__name__)


class NoteStore:
    """
    In-memory collection of notes backed by one JSON file.

    - list order is insertion order, and it survives save/load
    - every mutation rewrites the file before it is applied in memory;
      if the write fails the collection is left untouched
    - one lock guards mutations; reads take a snapshot under the same lock
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._notes: list[Note] = []
        self._lock = threading.RLock()
        self.loaded = False

    # ---------- persistence ----------
    def load(self) -> list[Note]:
        with self._lock:
            self._notes = storage.read_notes(self.path)
            self.loaded = True
            return list(self._notes)

    def save(self) -> None:
        with self._lock:
            storage.write_notes(self.path, self._notes)

    def _commit(self, notes: list[Note]) -> None:
        # write first; only swap the in-memory list once the file is durable
        storage.write_notes(self.path, notes)
        self._notes = notes

    def _index_of(self, note_id: str) -> int:
        for i, n in enumerate(self._notes):
            if n.id == note_id:
                return i
        raise NoteNotFound(note_id)

    # ---------- mutations ----------
    def create(self, title: str, body: str = "", tags: Optional[Iterable[str]] = None) -> Note:
        note = Note.new(title, body, tags)
        with self._lock:
            # uuid4 collisions are not expected, but ids must stay unique
            while any(n.id == note.id for n in self._notes):
                note = note.model_copy(update={"id": str(uuid4())})
            self._commit(self._notes + [note])
        logger.info("Created note %s '%s'", note.id, note.title)
        return note

    def update(self, note_id: str, fields: NoteUpdate) -> Note:
        with self._lock:
            i = self._index_of(note_id)
            note = self._notes[i].apply(fields)
            notes = list(self._notes)
            notes[i] = note
            self._commit(notes)
        logger.info("Updated note %s", note_id)
        return note

    def delete(self, note_id: str) -> Note:
        with self._lock:
            i = self._index_of(note_id)
            removed = self._notes[i]
            self._commit(self._notes[:i] + self._notes[i + 1:])
        logger.info("Deleted note %s", note_id)
        return removed

    def import_notes(self, records: Iterable[Mapping[str, Any]]) -> list[Note]:
        """Create one note per record (title/body/tags keys) with a single write."""
        created: list[Note] = []
        for rec in records:
            if not isinstance(rec, Mapping):
                raise NoteValidationError("Each imported record must be an object")
            # exports from older versions used "content"
            body = rec.get("body", rec.get("content", ""))
            tags = rec.get("tags") or []
            if isinstance(tags, str):
                tags = parse_tags(tags)
            created.append(Note.new(rec.get("title", ""), body or "", tags))
        with self._lock:
            self._commit(self._notes + created)
        logger.info("Imported %d notes", len(created))
        return created

    # ---------- queries ----------
    def _snapshot(self) -> list[Note]:
        with self._lock:
            return list(self._notes)

    def get(self, note_id: str) -> Note:
        with self._lock:
            return self._notes[self._index_of(note_id)]

    def get_by_index(self, index: int) -> Note:
        notes = self._snapshot()
        if not 0 <= index < len(notes):
            raise NoteNotFound(f"#{index + 1}")
        return notes[index]

    def list(self) -> list[Note]:
        return self._snapshot()

    def search(self, query: str) -> list[Note]:
        """Case-insensitive substring search; an empty query matches everything."""
        return [n for n in self._snapshot() if n.matches(query)]

    def filter_by_tag(self, tag: str) -> list[Note]:
        """Notes carrying ``tag`` (case-insensitive, like the stored tags)."""
        return [n for n in self._snapshot() if n.has_tag(tag)]

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._notes)

    def tags(self) -> list[str]:
        return sorted({t for n in self._snapshot() for t in normalize_tags(n.tags)})

    def stats(self) -> dict[str, Any]:
        notes = self._snapshot()
        last: Optional[datetime] = max((n.updated_at for n in notes), default=None)
        return {
            "total_notes": len(notes),
            "total_tags": len({t for n in notes for t in normalize_tags(n.tags)}),
            "last_updated": last,
        }

from __future__ import annotations
from datetime import datetime, UTC
from typing import Iterable, Optional
from uuid import uuid4

from pydantic import AwareDatetime, BaseModel, Field

from .errors import NoteValidationError


def _now() -> datetime:
    return datetime.now(UTC)


def normalize_tags(tags: Optional[Iterable[str]]) -> list[str]:
    """Strip, lowercase and dedupe tags, keeping first-seen order."""
    if not tags:
        return []
    seen: dict[str, None] = {}
    for t in tags:
        if t and t.strip():
            seen.setdefault(t.strip().lower(), None)
    return list(seen)


def parse_tags(raw: Optional[str]) -> list[str]:
    # "work, ideas,,Work" -> ["work", "ideas"]
    return normalize_tags((raw or "").split(","))


def clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise NoteValidationError("Title cannot be empty")
    return title


class NoteUpdate(BaseModel):
    """Partial update: a field left as None is not touched."""

    title: Optional[str] = None
    body: Optional[str] = None
    tags: Optional[list[str]] = None

    def is_empty(self) -> bool:
        return self.title is None and self.body is None and self.tags is None


class Note(BaseModel):
    # every field is required so a stored record missing one is rejected on load
    id: str = Field(min_length=1)
    title: str
    body: str
    tags: list[str]
    created_at: AwareDatetime
    updated_at: AwareDatetime

    @classmethod
    def new(cls, title: str, body: str = "", tags: Optional[Iterable[str]] = None) -> Note:
        now = _now()
        return cls(
            id=str(uuid4()),
            title=clean_title(title),
            body=body or "",
            tags=normalize_tags(tags),
            created_at=now,
            updated_at=now,
        )

    def apply(self, update: NoteUpdate) -> Note:
        """Return a copy with the supplied fields replaced and updated_at bumped."""
        changes: dict = {}
        if update.title is not None:
            changes["title"] = clean_title(update.title)
        if update.body is not None:
            changes["body"] = update.body
        if update.tags is not None:
            changes["tags"] = normalize_tags(update.tags)
        # clock can step backwards; never let updated_at go below its old value
        changes["updated_at"] = max(_now(), self.updated_at)
        return self.model_copy(update=changes)

    def has_tag(self, tag: str) -> bool:
        tag = tag.strip().lower()
        return any(t.lower() == tag for t in self.tags)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match over title, body and tags."""
        q = query.lower()
        return (
            q in self.title.lower()
            or q in self.body.lower()
            or any(q in t.lower() for t in self.tags)
        )

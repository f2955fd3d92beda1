from __future__ import annotations
from pathlib import Path


class JotbookError(Exception):
    """Base class for errors raised by the note store."""


class NoteNotFound(JotbookError):
    def __init__(self, note_id: str):
        self.note_id = note_id
        super().__init__(f"Note '{note_id}' not found")


class NoteValidationError(JotbookError):
    pass


class StorageError(JotbookError):
    """Reading or writing the notes file failed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")

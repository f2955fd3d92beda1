"""Jotbook: a personal notes manager with a CLI and a small REST API."""

from .errors import JotbookError, NoteNotFound, NoteValidationError, StorageError
from .models import Note, NoteUpdate
from .store import NoteStore

__version__ = "0.1.0"

__all__ = [
    "JotbookError",
    "Note",
    "NoteNotFound",
    "NoteStore",
    "NoteUpdate",
    "NoteValidationError",
    "StorageError",
]

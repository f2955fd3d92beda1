"""Reading and writing the JSON notes file."""

from __future__ import annotations
import json
import logging
import os
import stat
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from .errors import StorageError
from .models import Note

logger = logging.getLogger(__name__)

_NOTES = TypeAdapter(list[Note])
DEFAULT_FILE_MODE = 0o644


def read_notes(path: Path) -> list[Note]:
    """Load every note from ``path``; a missing file is an empty collection."""
    try:
        if not path.exists():
            logger.info("No notes file at %s, starting empty", path)
            return []
        raw = path.read_bytes()
    except OSError as e:
        raise StorageError(path, f"cannot read file ({e})") from e
    try:
        notes = _NOTES.validate_python(json.loads(raw.decode("utf-8")))
    except UnicodeDecodeError as e:
        raise StorageError(path, f"invalid UTF-8 ({e})") from e
    except json.JSONDecodeError as e:
        raise StorageError(path, f"invalid JSON ({e})") from e
    except ValidationError as e:
        raise StorageError(path, f"records do not match the note schema ({e.error_count()} errors)") from e

    ids = [n.id for n in notes]
    if len(ids) != len(set(ids)):
        raise StorageError(path, "duplicate note ids")
    logger.info("Loaded %d notes from %s", len(notes), path)
    return notes


def write_notes(path: Path, notes: Iterable[Note]) -> None:
    """Rewrite the whole file atomically: temp file in the same dir, then replace."""
    payload = _NOTES.dump_json(list(notes), indent=2).decode("utf-8")
    tmp = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            "w", encoding="utf-8", dir=str(path.parent), prefix=f".{path.name}.", delete=False
        ) as tmp:
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
        # temp files are created 0600; keep the existing file's mode, else 0644
        mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else DEFAULT_FILE_MODE
        os.chmod(tmp.name, mode)
        os.replace(tmp.name, path)
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        raise StorageError(path, f"cannot write file ({e})") from e
    finally:
        if tmp is not None and os.path.exists(tmp.name):
            os.unlink(tmp.name)

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_PATH = Path("data") / "notes.json"


def data_path() -> Path:
    # read on every call so tests can point JOTBOOK_DATA_PATH elsewhere
    env_path = os.getenv("JOTBOOK_DATA_PATH")
    return Path(env_path) if env_path else DEFAULT_DATA_PATH


@dataclass(frozen=True)
class Settings:
    data_path: Path
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "WARNING"
    cors_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> Settings:
        origins = os.getenv("JOTBOOK_CORS_ORIGINS", "*")
        return cls(
            data_path=data_path(),
            host=os.getenv("JOTBOOK_HOST", "127.0.0.1"),
            port=int(os.getenv("JOTBOOK_PORT", "8080")),
            log_level=os.getenv("JOTBOOK_LOG_LEVEL", "WARNING").upper(),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )

"""On-disk locations for the store and the HTTP response cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_float

APP_DIR_NAME: Final[str] = "globesync"
DEFAULT_DB_FILENAME: Final[str] = "globesync.db"
DEFAULT_DB_TIMEOUT_SECONDS: Final[float] = 30.0


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def ensure_data_dir(self) -> Path:
        path = self.data_dir.expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def file(self, name: str) -> Path:
        """Path of ``name`` inside the data directory, creating the directory."""
        return self.ensure_data_dir() / name

    def sqlite_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.file(self.database_filename)}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    timeout_seconds: float = DEFAULT_DB_TIMEOUT_SECONDS


def default_data_dir() -> Path:
    """``$XDG_DATA_HOME/globesync`` on POSIX, ``%LOCALAPPDATA%\\globesync`` on Windows."""

    if os.name == "nt":
        root = os.getenv("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    else:
        root = os.getenv("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(root) / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    configured = os.getenv("GLOBESYNC_DATA_DIR")
    return StorageConfig(data_dir=Path(configured) if configured else default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` when set, otherwise a SQLite file in the data directory.

    ``DATABASE_TIMEOUT`` bounds how long a connection waits for a lock or a pool slot.
    """

    timeout = env_float("DATABASE_TIMEOUT", DEFAULT_DB_TIMEOUT_SECONDS)
    configured = os.getenv("DATABASE_URI", "").strip()
    if configured:
        return DatabaseConfig(uri=configured, timeout_seconds=timeout)
    uri = (storage or get_storage_config()).sqlite_uri()
    return DatabaseConfig(uri=uri, timeout_seconds=timeout)


def get_database_uri() -> str:
    return get_database_config().uri

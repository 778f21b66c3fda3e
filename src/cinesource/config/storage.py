"""Where cinesource keeps its resolution database and HTTP cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "cinesource"
DEFAULT_DB_FILENAME: Final[str] = "cinesource.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"

DATA_DIR_ENV: Final[str] = "CINESOURCE_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
HTTP_CACHE_ENV: Final[str] = "CINESOURCE_HTTP_CACHE_PATH"
SQL_ECHO_ENV: Final[str] = "CINESOURCE_SQL_ECHO"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Local files: the SQLite resolution store and the hishel response cache.

    Both live in ``data_dir`` unless ``http_cache_override`` names a different
    file for the HTTP cache.
    """

    data_dir: Path
    http_cache_override: Path | None = None

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def _in_data_dir(self, filename: str, *, ensure: bool) -> Path:
        base = self.resolve_data_dir()
        if ensure:
            base.mkdir(parents=True, exist_ok=True)
        return base / filename

    def database_path(self, *, ensure: bool = True) -> Path:
        return self._in_data_dir(DEFAULT_DB_FILENAME, ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        if self.http_cache_override is None:
            return self._in_data_dir(HTTP_CACHE_FILENAME, ensure=ensure)
        path = self.http_cache_override.expanduser().resolve()
        if ensure:
            path.parent.mkdir(parents=True, exist_ok=True)
        return path


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.uri.startswith("sqlite")


def _platform_data_home() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        return Path(base) if base else Path.home() / "AppData" / "Local"
    base = os.getenv("XDG_DATA_HOME")
    return Path(base) if base else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv(DATA_DIR_ENV)
    data_dir = Path(env_dir) if env_dir else _platform_data_home() / APP_DIR_NAME
    cache_override = os.getenv(HTTP_CACHE_ENV)
    return StorageConfig(
        data_dir=data_dir,
        http_cache_override=Path(cache_override) if cache_override else None,
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    echo = os.getenv(SQL_ECHO_ENV, "").strip().lower() in _TRUTHY
    env_uri = os.getenv(DATABASE_URI_ENV)
    if env_uri:
        return DatabaseConfig(uri=env_uri, echo=echo)
    database_path = (storage or get_storage_config()).database_path()
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{database_path}", echo=echo)

from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from cinesource.config import storage


def test_storage_config_prefers_explicit_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("CINESOURCE_DATA_DIR", str(custom))

    result = storage.get_storage_config().resolve_data_dir()

    assert result == custom.resolve()


def test_database_uri_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite:///override.db")

    assert storage.get_database_config().uri == "sqlite:///override.db"


def test_database_uri_creates_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("CINESOURCE_DATA_DIR", str(tmp_path / "data-dir"))

    uri = storage.get_database_config().uri

    expected_path = (tmp_path / "data-dir" / storage.DEFAULT_DB_FILENAME).resolve()
    assert uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()


def test_http_cache_lives_beside_database(tmp_path: Path) -> None:
    config = storage.StorageConfig(data_dir=tmp_path)

    assert config.http_cache_path().parent == config.database_path().parent
    assert config.http_cache_path().name == storage.HTTP_CACHE_FILENAME


def test_http_cache_path_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CINESOURCE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("CINESOURCE_HTTP_CACHE_PATH", str(tmp_path / "cache" / "responses.db"))

    path = storage.get_storage_config().http_cache_path()

    assert path == (tmp_path / "cache" / "responses.db").resolve()
    assert path.parent.exists()


@pytest.mark.parametrize(
    ("raw", "expected"), [("1", True), ("Yes", True), ("0", False), ("", False)]
)
def test_sql_echo_flag(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://localhost/cinesource")
    monkeypatch.setenv("CINESOURCE_SQL_ECHO", raw)

    config = storage.get_database_config()

    assert config.echo is expected
    assert not config.is_sqlite

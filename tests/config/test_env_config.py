from __future__ import annotations

import pytest

from cinesource.config import (
    ConfigurationError,
    MissingConfigurationError,
    env_float,
    env_int,
    get_omdb_config,
    get_tmdb_config,
    get_wikipedia_config,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_env_numbers_fall_back_and_validate(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CINESOURCE_EXAMPLE", raising=False)
    assert env_int("CINESOURCE_EXAMPLE", 3) == 3
    assert env_float("CINESOURCE_EXAMPLE", 0.5) == 0.5

    monkeypatch.setenv("CINESOURCE_EXAMPLE", "7")
    assert env_int("CINESOURCE_EXAMPLE", 3) == 7
    assert env_float("CINESOURCE_EXAMPLE", 0.5) == 7.0

    monkeypatch.setenv("CINESOURCE_EXAMPLE", "seven")
    with pytest.raises(ConfigurationError, match="CINESOURCE_EXAMPLE"):
        env_int("CINESOURCE_EXAMPLE", 3)


def test_provider_configs_read_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TMDB_API_KEY", "tmdb-key")
    monkeypatch.setenv("OMDB_API_KEY", "omdb-key")
    monkeypatch.setenv("CINESOURCE_CONTACT", "ops@example.org")

    tmdb = get_tmdb_config()
    omdb = get_omdb_config()
    wikipedia = get_wikipedia_config()

    assert tmdb.api_key == "tmdb-key"
    assert tmdb.resilience.name == "tmdb"
    assert tmdb.resilience.ratelimit is not None
    assert omdb.api_key == "omdb-key"
    assert wikipedia.resilience.default_headers == {
        "User-Agent": "cinesource/0.1 (ops@example.org)"
    }


def test_provider_configs_require_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TMDB_API_KEY", raising=False)

    with pytest.raises(MissingConfigurationError, match="TMDB_API_KEY"):
        get_tmdb_config()

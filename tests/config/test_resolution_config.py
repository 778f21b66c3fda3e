from __future__ import annotations

import pytest

from cinesource.config import ConfigurationError, ResolutionConfig, get_resolution_config
from cinesource.config.resolution import DEFAULT_CONCURRENCY

_ENV_NAMES = (
    "CINESOURCE_CONCURRENCY",
    "CINESOURCE_MAX_IN_FLIGHT",
    "CINESOURCE_STOP_EARLY_THRESHOLD",
    "CINESOURCE_MIN_ACCEPT_CONFIDENCE",
    "CINESOURCE_REVIEW_FLOOR",
    "CINESOURCE_CACHE_TTL_SECONDS",
    "CINESOURCE_SOURCE_TIMEOUT_SECONDS",
    "CINESOURCE_RATE_LIMIT_BACKOFF_SECONDS",
    "CINESOURCE_COMPARISON_SOURCES",
    "CINESOURCE_MAX_BACKOFF_SECONDS",
    "CINESOURCE_REVIEW_CONFLICT_LIMIT",
    "CINESOURCE_YEAR_TOLERANCE",
    "CINESOURCE_TEXT_HIGH_SIMILARITY",
    "CINESOURCE_TEXT_MEDIUM_SIMILARITY",
    "CINESOURCE_NUMERIC_HIGH_DIVERGENCE",
    "CINESOURCE_NUMERIC_MEDIUM_DIVERGENCE",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    config = get_resolution_config()

    assert config.concurrency == DEFAULT_CONCURRENCY
    assert config.review_floor == 0.5
    assert config.comparison_sources == ("omdb",)
    assert config.cache_ttl_seconds == 30 * 24 * 60 * 60


def test_environment_overrides(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CINESOURCE_CONCURRENCY", "4")
    clean_env.setenv("CINESOURCE_MIN_ACCEPT_CONFIDENCE", "0.6")
    clean_env.setenv("CINESOURCE_COMPARISON_SOURCES", " omdb , wikipedia ,")

    config = get_resolution_config()

    assert config.concurrency == 4
    assert config.min_accept_confidence == 0.6
    assert config.comparison_sources == ("omdb", "wikipedia")


def test_empty_comparison_list_disables_comparison(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CINESOURCE_COMPARISON_SOURCES", "")

    assert get_resolution_config().comparison_sources == ()


def test_backoff_and_conflict_settings_from_environment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CINESOURCE_MAX_BACKOFF_SECONDS", "12")
    clean_env.setenv("CINESOURCE_REVIEW_CONFLICT_LIMIT", "3")
    clean_env.setenv("CINESOURCE_YEAR_TOLERANCE", "1")
    clean_env.setenv("CINESOURCE_TEXT_MEDIUM_SIMILARITY", "0.9")
    clean_env.setenv("CINESOURCE_NUMERIC_HIGH_DIVERGENCE", "0.3")

    config = get_resolution_config()

    assert config.max_backoff_seconds == 12.0
    assert config.review_conflict_limit == 3
    thresholds = config.conflict_thresholds
    assert thresholds.year_tolerance == 1
    assert thresholds.text_high == 0.5
    assert thresholds.text_medium == 0.9
    assert thresholds.numeric_high == 0.3
    assert thresholds.numeric_medium == 0.10


def test_inconsistent_thresholds_are_a_configuration_error(
    clean_env: pytest.MonkeyPatch,
) -> None:
    clean_env.setenv("CINESOURCE_TEXT_HIGH_SIMILARITY", "0.9")
    clean_env.setenv("CINESOURCE_TEXT_MEDIUM_SIMILARITY", "0.6")

    with pytest.raises(ConfigurationError, match="conflict thresholds"):
        get_resolution_config()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"concurrency": 0},
        {"max_in_flight": 0},
        {"review_floor": 1.5},
        {"min_accept_confidence": -0.1},
        {"cache_ttl_seconds": 0},
        {"max_backoff_seconds": 0.5},
        {"review_conflict_limit": 0},
    ],
)
def test_invalid_values_are_rejected(kwargs: dict[str, float]) -> None:
    with pytest.raises(ConfigurationError):
        ResolutionConfig(**kwargs)  # type: ignore[arg-type]

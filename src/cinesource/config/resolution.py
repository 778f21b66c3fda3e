"""Resolution engine configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Final

from cinesource.domain.resolution.conflicts import ConflictThresholds
from cinesource.domain.resolution.review import DEFAULT_CONFLICT_LIMIT

from .env import env_float, env_int
from .errors import ConfigurationError

DEFAULT_CONCURRENCY: Final[int] = 20
DEFAULT_MAX_IN_FLIGHT: Final[int] = 8
DEFAULT_CACHE_TTL_SECONDS: Final[float] = 30 * 24 * 60 * 60.0
DEFAULT_REVIEW_FLOOR: Final[float] = 0.5
DEFAULT_MAX_BACKOFF_SECONDS: Final[float] = 30.0
DEFAULT_COMPARISON_SOURCES: Final[tuple[str, ...]] = ("omdb",)


@dataclass(frozen=True, slots=True)
class ResolutionConfig:
    """Tunables shared by every resolution run."""

    concurrency: int = DEFAULT_CONCURRENCY
    max_in_flight: int = DEFAULT_MAX_IN_FLIGHT
    stop_early_threshold: float = 0.0
    min_accept_confidence: float = 0.0
    review_floor: float = DEFAULT_REVIEW_FLOOR
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    source_timeout_seconds: float = 10.0
    rate_limit_backoff_seconds: float = 1.0
    max_backoff_seconds: float = DEFAULT_MAX_BACKOFF_SECONDS
    conflict_thresholds: ConflictThresholds = field(default_factory=ConflictThresholds)
    review_conflict_limit: int = DEFAULT_CONFLICT_LIMIT
    comparison_sources: tuple[str, ...] = DEFAULT_COMPARISON_SOURCES

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ConfigurationError("concurrency must be at least 1")
        if self.max_in_flight < 1:
            raise ConfigurationError("max_in_flight must be at least 1")
        for name in ("stop_early_threshold", "min_accept_confidence", "review_floor"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be within [0, 1], got {value}")
        if self.cache_ttl_seconds <= 0:
            raise ConfigurationError("cache_ttl_seconds must be positive")
        if self.max_backoff_seconds < self.rate_limit_backoff_seconds:
            raise ConfigurationError("max_backoff_seconds must not be below the backoff")
        if self.review_conflict_limit < 1:
            raise ConfigurationError("review_conflict_limit must be at least 1")


def get_resolution_config() -> ResolutionConfig:
    return ResolutionConfig(
        concurrency=env_int("CINESOURCE_CONCURRENCY", DEFAULT_CONCURRENCY),
        max_in_flight=env_int("CINESOURCE_MAX_IN_FLIGHT", DEFAULT_MAX_IN_FLIGHT),
        stop_early_threshold=env_float("CINESOURCE_STOP_EARLY_THRESHOLD", 0.0),
        min_accept_confidence=env_float("CINESOURCE_MIN_ACCEPT_CONFIDENCE", 0.0),
        review_floor=env_float("CINESOURCE_REVIEW_FLOOR", DEFAULT_REVIEW_FLOOR),
        cache_ttl_seconds=env_float("CINESOURCE_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS),
        source_timeout_seconds=env_float("CINESOURCE_SOURCE_TIMEOUT_SECONDS", 10.0),
        rate_limit_backoff_seconds=env_float("CINESOURCE_RATE_LIMIT_BACKOFF_SECONDS", 1.0),
        max_backoff_seconds=env_float(
            "CINESOURCE_MAX_BACKOFF_SECONDS", DEFAULT_MAX_BACKOFF_SECONDS
        ),
        conflict_thresholds=_conflict_thresholds(),
        review_conflict_limit=env_int("CINESOURCE_REVIEW_CONFLICT_LIMIT", DEFAULT_CONFLICT_LIMIT),
        comparison_sources=_env_names("CINESOURCE_COMPARISON_SOURCES", DEFAULT_COMPARISON_SOURCES),
    )


def _env_names(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _conflict_thresholds() -> ConflictThresholds:
    defaults = ConflictThresholds()
    try:
        return ConflictThresholds(
            year_tolerance=env_int("CINESOURCE_YEAR_TOLERANCE", defaults.year_tolerance),
            text_high=env_float("CINESOURCE_TEXT_HIGH_SIMILARITY", defaults.text_high),
            text_medium=env_float("CINESOURCE_TEXT_MEDIUM_SIMILARITY", defaults.text_medium),
            numeric_high=env_float("CINESOURCE_NUMERIC_HIGH_DIVERGENCE", defaults.numeric_high),
            numeric_medium=env_float(
                "CINESOURCE_NUMERIC_MEDIUM_DIVERGENCE", defaults.numeric_medium
            ),
        )
    except ValueError as exc:
        raise ConfigurationError(f"invalid conflict thresholds: {exc}") from exc

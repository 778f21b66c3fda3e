"""TMDB configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import HTTP_CACHE_TTL_SECONDS, CacheConfig, RateLimit, ResilienceConfig

TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"


@dataclass(frozen=True, slots=True)
class TmdbConfig:
    api_key: str
    resilience: ResilienceConfig
    image_base_url: str = TMDB_IMAGE_BASE_URL


def get_tmdb_config(*, resilience: ResilienceConfig | None = None) -> TmdbConfig:
    values = require_env_vars(("TMDB_API_KEY",))
    return TmdbConfig(
        api_key=values["TMDB_API_KEY"],
        resilience=resilience
        or ResilienceConfig(
            name="tmdb",
            base_url=TMDB_BASE_URL,
            ratelimit=RateLimit(max_calls=4, per_seconds=1.0),
            cache=CacheConfig(default_ttl_seconds=HTTP_CACHE_TTL_SECONDS),
        ),
    )

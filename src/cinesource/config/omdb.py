"""OMDb configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import HTTP_CACHE_TTL_SECONDS, CacheConfig, RateLimit, ResilienceConfig

OMDB_BASE_URL = "https://www.omdbapi.com/"


@dataclass(frozen=True, slots=True)
class OmdbConfig:
    api_key: str
    resilience: ResilienceConfig


def get_omdb_config(*, resilience: ResilienceConfig | None = None) -> OmdbConfig:
    values = require_env_vars(("OMDB_API_KEY",))
    return OmdbConfig(
        api_key=values["OMDB_API_KEY"],
        resilience=resilience
        or ResilienceConfig(
            name="omdb",
            base_url=OMDB_BASE_URL,
            ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
            cache=CacheConfig(default_ttl_seconds=HTTP_CACHE_TTL_SECONDS),
        ),
    )

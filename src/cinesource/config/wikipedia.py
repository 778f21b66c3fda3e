"""Wikipedia REST API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import HTTP_CACHE_TTL_SECONDS, CacheConfig, RateLimit, ResilienceConfig

WIKIPEDIA_BASE_URL = "https://en.wikipedia.org/api/rest_v1"


@dataclass(frozen=True, slots=True)
class WikipediaConfig:
    resilience: ResilienceConfig


def get_wikipedia_config() -> WikipediaConfig:
    values = require_env_vars(("CINESOURCE_CONTACT",))
    user_agent = f"cinesource/0.1 ({values['CINESOURCE_CONTACT']})"
    return WikipediaConfig(
        resilience=ResilienceConfig(
            name="wikipedia",
            base_url=WIKIPEDIA_BASE_URL,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            cache=CacheConfig(default_ttl_seconds=HTTP_CACHE_TTL_SECONDS),
            default_headers={"User-Agent": user_agent},
        )
    )

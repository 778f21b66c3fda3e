"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .omdb import OmdbConfig, get_omdb_config
from .resolution import ResolutionConfig, get_resolution_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .tmdb import TmdbConfig, get_tmdb_config
from .wikipedia import WikipediaConfig, get_wikipedia_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "OmdbConfig",
    "RateLimit",
    "ResilienceConfig",
    "ResolutionConfig",
    "RetryPolicy",
    "StorageConfig",
    "TmdbConfig",
    "WikipediaConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "get_database_config",
    "get_omdb_config",
    "get_resolution_config",
    "get_storage_config",
    "get_tmdb_config",
    "get_wikipedia_config",
    "require_env_vars",
]

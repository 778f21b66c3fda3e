"""Domain port definitions for adapters."""

from __future__ import annotations

from .cache import CacheStore, CacheStoreError
from .persistence import PersistenceFailure, ResolutionRepository
from .sources import (
    Observation,
    SourceAdapter,
    SourceAuthError,
    SourceError,
    SourceParseError,
    SourcePayload,
    SourceRateLimitedError,
    SourceUnavailableError,
)
from .unit_of_work import (
    RepositoryCollection,
    ResolutionRepositories,
    ResolutionUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "CacheStore",
    "CacheStoreError",
    "Observation",
    "PersistenceFailure",
    "RepositoryCollection",
    "ResolutionRepositories",
    "ResolutionRepository",
    "ResolutionUnitOfWork",
    "SourceAdapter",
    "SourceAuthError",
    "SourceError",
    "SourceParseError",
    "SourcePayload",
    "SourceRateLimitedError",
    "SourceUnavailableError",
    "UnitOfWork",
]

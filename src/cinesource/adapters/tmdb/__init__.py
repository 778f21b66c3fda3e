"""TMDB source adapter."""

from __future__ import annotations

from .client import TmdbClient
from .fetcher import TmdbSource

__all__ = ["TmdbClient", "TmdbSource"]

"""OMDb source adapter."""

from __future__ import annotations

from .client import OmdbClient
from .fetcher import OmdbSource

__all__ = ["OmdbClient", "OmdbSource"]

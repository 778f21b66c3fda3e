"""Wikipedia source adapter."""

from __future__ import annotations

from .client import WikipediaClient
from .fetcher import WikipediaSource

__all__ = ["WikipediaClient", "WikipediaSource"]

"""Port for the storage behind the response cache."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from cinesource.domain.model import CacheEntry


class CacheStoreError(RuntimeError):
    """Raised when a cache backend cannot read or write an entry."""


@runtime_checkable
class CacheStore(Protocol):
    def load(self, source_id: str, entity_key: str) -> CacheEntry | None: ...

    def save(self, entry: CacheEntry) -> None: ...

    def delete(self, source_id: str, entity_key: str) -> None: ...

    def purge_expired(self, now: datetime) -> int: ...


__all__ = ["CacheStore", "CacheStoreError"]

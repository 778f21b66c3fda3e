"""Response cache keyed by (source, entity) with expiry."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from cinesource.domain.model import CacheEntry
from cinesource.domain.ports.cache import CacheStoreError

if TYPE_CHECKING:
    from collections.abc import Callable

    from cinesource.domain.model import Candidate, EntityKey
    from cinesource.domain.ports.cache import CacheStore

log = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=30)


class InMemoryCacheStore:
    """Process-local cache store."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def load(self, source_id: str, entity_key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get((source_id, entity_key))

    def save(self, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[(entry.source_id, entry.entity_key)] = entry

    def delete(self, source_id: str, entity_key: str) -> None:
        with self._lock:
            self._entries.pop((source_id, entity_key), None)

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
            return len(expired)


class ResponseCache:
    """Remembers the last successful payload of each source per entity.

    Entries are replaced, never modified. Expired entries read as misses and are
    evicted on the spot. Store failures are logged and treated as misses so a
    broken cache only costs extra fetches.
    """

    def __init__(
        self,
        store: CacheStore,
        *,
        default_ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if default_ttl <= timedelta(0):
            raise ValueError("default_ttl must be positive")
        self._store = store
        self._default_ttl = default_ttl
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def store(self) -> CacheStore:
        return self._store

    def get(self, source_id: str, entity_key: EntityKey) -> CacheEntry | None:
        key = entity_key.cache_key
        try:
            entry = self._store.load(source_id, key)
        except CacheStoreError:
            log.warning("Cache read failed for %s/%s", source_id, key, exc_info=True)
            return None
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            log.debug("Cache entry for %s/%s expired at %s", source_id, key, entry.expires_at)
            try:
                self._store.delete(source_id, key)
            except CacheStoreError:
                log.warning("Cache eviction failed for %s/%s", source_id, key, exc_info=True)
            return None
        return entry

    def put(
        self,
        source_id: str,
        entity_key: EntityKey,
        payload: tuple[Candidate, ...],
        *,
        fetched_at: datetime | None = None,
        ttl: timedelta | None = None,
    ) -> CacheEntry | None:
        fetched = fetched_at or self._clock()
        entry = CacheEntry(
            source_id=source_id,
            entity_key=entity_key.cache_key,
            payload=tuple(payload),
            fetched_at=fetched,
            expires_at=fetched + (ttl or self._default_ttl),
        )
        try:
            self._store.save(entry)
        except CacheStoreError:
            log.warning(
                "Cache write failed for %s/%s; continuing uncached",
                source_id,
                entry.entity_key,
                exc_info=True,
            )
            return None
        return entry

    def sweep(self) -> int:
        """Drop every expired entry and return how many were removed."""

        removed = self._store.purge_expired(self._clock())
        log.info("Swept %d expired cache entries", removed)
        return removed

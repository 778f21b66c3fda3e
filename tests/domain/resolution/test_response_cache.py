from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from cinesource.domain.model import Candidate, FieldName
from cinesource.domain.ports.cache import CacheStoreError
from cinesource.domain.resolution import DEFAULT_TTL, InMemoryCacheStore, ResponseCache
from tests.helpers.sources import FIXED_NOW, FakeClock, film

if TYPE_CHECKING:
    from datetime import datetime

    from cinesource.domain.model import CacheEntry


class _BrokenStore:
    def load(self, source_id: str, entity_key: str) -> CacheEntry | None:
        raise CacheStoreError("disk on fire")

    def save(self, entry: CacheEntry) -> None:
        raise CacheStoreError("disk on fire")

    def delete(self, source_id: str, entity_key: str) -> None:
        raise CacheStoreError("disk on fire")

    def purge_expired(self, now: datetime) -> int:
        raise CacheStoreError("disk on fire")


def _payload() -> tuple[Candidate, ...]:
    return (
        Candidate(
            field=FieldName.DIRECTOR,
            value="Michael Mann",
            confidence=0.95,
            source_id="tmdb",
            fetched_at=FIXED_NOW,
        ),
    )


def test_put_then_get_returns_entry() -> None:
    cache = ResponseCache(InMemoryCacheStore(), clock=FakeClock())

    stored = cache.put("tmdb", film(), _payload())
    entry = cache.get("tmdb", film())

    assert entry is not None
    assert entry == stored
    assert entry.payload == _payload()
    assert entry.expires_at == FIXED_NOW + DEFAULT_TTL
    assert cache.get("omdb", film()) is None


def test_expired_entry_is_a_miss_and_evicted() -> None:
    store = InMemoryCacheStore()
    clock = FakeClock()
    cache = ResponseCache(store, clock=clock)
    cache.put("tmdb", film(), _payload(), ttl=timedelta(hours=1))

    clock.advance(hours=1)

    assert cache.get("tmdb", film()) is None
    assert len(store) == 0


def test_entries_are_keyed_by_entity_identity() -> None:
    cache = ResponseCache(InMemoryCacheStore(), clock=FakeClock())
    cache.put("tmdb", film("Heat", 1995, tmdb_id=949), _payload())

    assert cache.get("tmdb", film("Heat (director's cut)", 1995, tmdb_id=949)) is not None
    assert cache.get("tmdb", film("Heat", 1986)) is None


def test_sweep_removes_only_expired_entries() -> None:
    store = InMemoryCacheStore()
    clock = FakeClock()
    cache = ResponseCache(store, clock=clock)
    cache.put("tmdb", film("Heat"), _payload(), ttl=timedelta(minutes=5))
    cache.put("tmdb", film("Thief", 1981), _payload(), ttl=timedelta(days=2))

    clock.advance(hours=1)

    assert cache.sweep() == 1
    assert len(store) == 1


def test_store_failures_degrade_to_misses() -> None:
    cache = ResponseCache(_BrokenStore(), clock=FakeClock())

    assert cache.put("tmdb", film(), _payload()) is None
    assert cache.get("tmdb", film()) is None


def test_default_ttl_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ResponseCache(InMemoryCacheStore(), default_ttl=timedelta(0))

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import TYPE_CHECKING, Literal

import pytest
from sqlalchemy.exc import OperationalError

from cinesource.app import (
    build_engine,
    build_registrations,
    resolve_entities,
    sweep_response_cache,
)
from cinesource.config import ResolutionConfig
from cinesource.domain.model import FieldName, SourcePool
from cinesource.domain.ports.persistence import PersistenceFailure
from cinesource.domain.ports.unit_of_work import ResolutionRepositories
from cinesource.domain.resolution import (
    InMemoryCacheStore,
    ResolutionEngine,
    ResolutionOptions,
    ResolutionRequest,
    ResponseCache,
)
from tests.helpers.sources import FIXED_NOW, FakeClock, FakeSource, film, make_engine, register

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from cinesource.adapters.sqlalchemy.unit_of_work import SqlAlchemyResolutionUnitOfWork
    from cinesource.domain.model import EntityKey, ResolvedRecord

REQUESTED = frozenset({FieldName.DIRECTOR, FieldName.RELEASE_YEAR})


def _heat_engine(clock: FakeClock, *, comparison_year: int = 1996) -> ResolutionEngine:
    return make_engine(
        register(
            FakeSource("tmdb", {FieldName.DIRECTOR: "Michael Mann", FieldName.RELEASE_YEAR: 1995}),
            priority=1,
            confidence=0.95,
        ),
        register(
            FakeSource("omdb", {FieldName.RELEASE_YEAR: comparison_year}),
            priority=2,
            confidence=0.75,
            pool=SourcePool.COMPARISON,
        ),
        clock=clock,
    )


class _FailingRepository:
    def __init__(self, error: Exception) -> None:
        self.error = error

    def get_resolved_record(self, entity_key: EntityKey) -> ResolvedRecord | None:
        return None

    def upsert_resolved_record(self, *args: object) -> None:
        raise self.error

    def upsert_conflict(self, *args: object) -> None:
        raise self.error

    def upsert_cache_entry(self, *args: object) -> None:
        raise self.error

    def append_verification_history(self, *args: object) -> None:
        raise self.error


class _FailingUnitOfWork:
    def __init__(self, error: Exception) -> None:
        self.repositories = ResolutionRepositories(resolutions=_FailingRepository(error))
        self.committed = False

    def __enter__(self) -> _FailingUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        return False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        return None


def test_resolve_entities_persists_record_conflicts_and_history(
    sqlite_unit_of_work: Callable[[], SqlAlchemyResolutionUnitOfWork],
) -> None:
    clock = FakeClock()

    (outcome,) = resolve_entities(
        [ResolutionRequest(film(), REQUESTED)],
        engine=_heat_engine(clock),
        unit_of_work_factory=sqlite_unit_of_work,
        options=ResolutionOptions(),
        now_provider=clock,
    )

    assert outcome.persisted
    assert outcome.result.needs_manual_review
    with sqlite_unit_of_work() as uow:
        repository = uow.repositories.resolutions
        stored = repository.get_resolved_record(film())
        conflicts = repository.list_conflicts(film())
        history = repository.verification_history(film())

    assert stored == outcome.result.record
    assert [conflict.field for conflict in conflicts] == [FieldName.RELEASE_YEAR]
    (entry,) = history
    assert entry.verified_at == FIXED_NOW
    assert entry.sources_checked == ("tmdb", "omdb")
    assert entry.confidence_before is None
    assert entry.conflicts_found == 1


def test_rerun_is_seeded_from_stored_record(
    sqlite_unit_of_work: Callable[[], SqlAlchemyResolutionUnitOfWork],
) -> None:
    clock = FakeClock()
    engine = _heat_engine(clock, comparison_year=1995)
    request = ResolutionRequest(film(), REQUESTED)

    (first,) = resolve_entities(
        [request], engine=engine, unit_of_work_factory=sqlite_unit_of_work, now_provider=clock
    )
    clock.advance(days=1)
    (second,) = resolve_entities(
        [request], engine=engine, unit_of_work_factory=sqlite_unit_of_work, now_provider=clock
    )

    assert second.result.confidence_before == first.result.record.confidence
    assert second.result.record.fields == first.result.record.fields
    assert not second.result.needs_manual_review
    with sqlite_unit_of_work() as uow:
        history = uow.repositories.resolutions.verification_history(film())
    assert [entry.verified_at for entry in history] == [FIXED_NOW, FIXED_NOW + timedelta(days=1)]


@pytest.mark.parametrize(
    "error",
    [
        PersistenceFailure(film(), "constraint violated"),
        OperationalError("INSERT INTO resolved_record", {}, Exception("disk full")),
    ],
)
def test_persistence_failures_are_reported_per_entity(error: Exception) -> None:
    clock = FakeClock()

    outcomes = resolve_entities(
        [ResolutionRequest(film(), REQUESTED), ResolutionRequest(film("Thief", 1981), REQUESTED)],
        engine=_heat_engine(clock),
        unit_of_work_factory=lambda: _FailingUnitOfWork(error),
        options=ResolutionOptions(),
        now_provider=clock,
    )

    assert [outcome.persisted for outcome in outcomes] == [False, False]
    failure = outcomes[0].failure
    assert isinstance(failure, PersistenceFailure)
    assert failure.entity_key == film()
    assert outcomes[1].result.record.value_of(FieldName.DIRECTOR) == "Michael Mann"


def test_build_registrations_skips_unconfigured_sources(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TMDB_API_KEY", "tmdb-key")
    monkeypatch.setenv("OMDB_API_KEY", "omdb-key")
    monkeypatch.delenv("CINESOURCE_CONTACT", raising=False)

    registrations = build_registrations(ResolutionConfig(comparison_sources=("omdb",)))

    assert [(r.adapter.name, r.pool) for r in registrations] == [
        ("tmdb", SourcePool.PRIMARY),
        ("omdb", SourcePool.COMPARISON),
    ]
    assert registrations[0].max_calls == 4
    assert registrations[0].cache_ttl == timedelta(days=30)


def test_build_engine_without_sources_flags_every_entity() -> None:
    engine = build_engine(ResolutionConfig(), registrations=[], clock=FakeClock())

    (result,) = asyncio.run(
        engine.resolve_many([ResolutionRequest(film(), REQUESTED)], options=ResolutionOptions())
    )

    assert result.needs_manual_review
    assert result.record.fields == {}


def test_sweep_response_cache_removes_expired_entries() -> None:
    store = InMemoryCacheStore()
    clock = FakeClock()
    cache = ResponseCache(store, clock=clock)
    cache.put("tmdb", film(), (), ttl=timedelta(hours=1))
    cache.put("tmdb", film("Thief", 1981), (), ttl=timedelta(days=1))
    clock.advance(hours=2)

    assert sweep_response_cache(store=store, now_provider=clock) == 1
    assert len(store) == 1

"""Application entry points wiring configuration, sources, engine and storage."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from sqlalchemy.exc import SQLAlchemyError

from cinesource.adapters.omdb import OmdbSource
from cinesource.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyResolutionUnitOfWork,
    cache_store,
    is_started,
    startup,
)
from cinesource.adapters.tmdb import TmdbSource
from cinesource.adapters.wikipedia import WikipediaSource
from cinesource.config import (
    MissingConfigurationError,
    get_omdb_config,
    get_resolution_config,
    get_tmdb_config,
    get_wikipedia_config,
)
from cinesource.domain.model import SourcePool
from cinesource.domain.ports.persistence import PersistenceFailure
from cinesource.domain.resolution import (
    ConfidenceTier,
    ConflictDetector,
    InMemoryCacheStore,
    ResolutionEngine,
    ResolutionOptions,
    ResolutionRequest,
    ResponseCache,
    ReviewPolicy,
    SourceRateLimiter,
    SourceRegistration,
    SourceRegistry,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from cinesource.config import ResilienceConfig, ResolutionConfig
    from cinesource.domain.model import ResolvedRecord
    from cinesource.domain.ports.cache import CacheStore
    from cinesource.domain.ports.sources import SourceAdapter
    from cinesource.domain.ports.unit_of_work import ResolutionUnitOfWork
    from cinesource.domain.resolution import CancelToken, ResolutionResult

log = getLogger(__name__)

type UnitOfWorkFactory = Callable[[], ResolutionUnitOfWork]

TMDB_PRIORITY = 10
WIKIPEDIA_PRIORITY = 20
OMDB_PRIORITY = 30


@dataclass(frozen=True, slots=True)
class PersistenceOutcome:
    result: ResolutionResult
    failure: PersistenceFailure | None = None

    @property
    def persisted(self) -> bool:
        return self.failure is None


def _rate_limit(resilience: ResilienceConfig) -> dict[str, Any]:
    if resilience.ratelimit is None:
        return {}
    return {
        "max_calls": resilience.ratelimit.max_calls,
        "per_seconds": resilience.ratelimit.per_seconds,
    }


def _tmdb() -> tuple[SourceAdapter, ResilienceConfig]:
    config = get_tmdb_config()
    return TmdbSource(config=config), config.resilience


def _wikipedia() -> tuple[SourceAdapter, ResilienceConfig]:
    config = get_wikipedia_config()
    return WikipediaSource(config=config), config.resilience


def _omdb() -> tuple[SourceAdapter, ResilienceConfig]:
    config = get_omdb_config()
    return OmdbSource(config=config), config.resilience


SOURCE_FACTORIES: Final = (
    ("tmdb", TMDB_PRIORITY, ConfidenceTier.AUTHORITATIVE, _tmdb),
    ("wikipedia", WIKIPEDIA_PRIORITY, ConfidenceTier.ENCYCLOPEDIC, _wikipedia),
    ("omdb", OMDB_PRIORITY, ConfidenceTier.AGGREGATED, _omdb),
)


def build_registrations(config: ResolutionConfig | None = None) -> list[SourceRegistration]:
    """Register every provider whose credentials are configured.

    Providers named in ``config.comparison_sources`` join the comparison pool;
    the rest are primary sources consulted in priority order.
    """

    config = config or get_resolution_config()
    ttl = timedelta(seconds=config.cache_ttl_seconds)
    registrations: list[SourceRegistration] = []
    for name, priority, tier, factory in SOURCE_FACTORIES:
        try:
            adapter, resilience = factory()
        except MissingConfigurationError as exc:
            log.warning("Skipping source %s: %s", name, exc)
            continue
        pool = SourcePool.COMPARISON if name in config.comparison_sources else SourcePool.PRIMARY
        registrations.append(
            SourceRegistration(
                adapter=adapter,
                priority=priority,
                base_confidence=tier,
                pool=pool,
                cache_ttl=ttl,
                timeout_seconds=config.source_timeout_seconds,
                **_rate_limit(resilience),
            )
        )
    log.info(
        "Registered sources: %s",
        ", ".join(f"{r.adapter.name}({r.pool})" for r in registrations) or "-",
    )
    return registrations


def build_engine(
    config: ResolutionConfig | None = None,
    *,
    registrations: Iterable[SourceRegistration] | None = None,
    store: CacheStore | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ResolutionEngine:
    config = config or get_resolution_config()
    if registrations is None:
        registrations = build_registrations(config)
    registry = SourceRegistry(registrations, clock=clock)
    cache = ResponseCache(
        store or InMemoryCacheStore(),
        default_ttl=timedelta(seconds=config.cache_ttl_seconds),
        clock=clock,
    )
    return ResolutionEngine(
        registry,
        cache=cache,
        rate_limiter=SourceRateLimiter(
            max_in_flight=config.max_in_flight,
            backoff_seconds=config.rate_limit_backoff_seconds,
            max_backoff_seconds=config.max_backoff_seconds,
            default_timeout=config.source_timeout_seconds,
        ),
        conflict_detector=ConflictDetector(config.conflict_thresholds),
        review_policy=ReviewPolicy(
            review_floor=config.review_floor, conflict_limit=config.review_conflict_limit
        ),
        concurrency=config.concurrency,
        clock=clock,
    )


def resolve_entities(
    requests: Sequence[ResolutionRequest],
    *,
    engine: ResolutionEngine | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    options: ResolutionOptions | None = None,
    cancel_token: CancelToken | None = None,
    now_provider: Callable[[], datetime] | None = None,
) -> list[PersistenceOutcome]:
    """Resolve entities against the registered sources and persist the results.

    Previously stored records seed each run so confidences never go down unless
    ``options.override`` is set. Each entity is written in its own unit of work;
    a failed write is reported on that entity's outcome and does not affect the
    others.
    """

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyResolutionUnitOfWork
    if engine is None:
        engine = build_engine(store=cache_store() if is_started() else None, clock=now_provider)

    seeded = _with_previous_records(requests, unit_of_work_factory)
    options = options or _default_options()
    results = asyncio.run(
        engine.resolve_many(seeded, options=options, cancel_token=cancel_token)
    )

    outcomes = [_persist(result, unit_of_work_factory, now_provider) for result in results]
    failed = sum(1 for outcome in outcomes if not outcome.persisted)
    log.info(
        "Resolved %d of %d entities (%d flagged for review, %d persistence failures)",
        len(outcomes),
        len(requests),
        sum(1 for outcome in outcomes if outcome.result.needs_manual_review),
        failed,
    )
    return outcomes


def sweep_response_cache(
    *,
    store: CacheStore | None = None,
    now_provider: Callable[[], datetime] | None = None,
) -> int:
    """Delete expired response cache entries and return how many were removed."""

    if store is None:
        if not is_started():
            startup()
        store = cache_store()
    removed = ResponseCache(store, clock=now_provider).sweep()
    log.info("Removed %d expired response cache entries", removed)
    return removed


def _default_options() -> ResolutionOptions:
    config = get_resolution_config()
    return ResolutionOptions(
        min_accept_confidence=config.min_accept_confidence,
        stop_early_threshold=config.stop_early_threshold,
    )


def _with_previous_records(
    requests: Sequence[ResolutionRequest],
    unit_of_work_factory: UnitOfWorkFactory,
) -> list[ResolutionRequest]:
    seeded: list[ResolutionRequest] = []
    with unit_of_work_factory() as uow:
        repository = uow.repositories.resolutions
        for request in requests:
            previous: ResolvedRecord | None = request.previous
            if previous is None:
                previous = repository.get_resolved_record(request.entity_key)
            seeded.append(
                ResolutionRequest(request.entity_key, request.requested_fields, previous)
            )
    return seeded


def _persist(
    result: ResolutionResult,
    unit_of_work_factory: UnitOfWorkFactory,
    now_provider: Callable[[], datetime] | None,
) -> PersistenceOutcome:
    entity_key = result.entity_key
    verified_at = now_provider() if now_provider else datetime.now(UTC)
    try:
        with unit_of_work_factory() as uow:
            repository = uow.repositories.resolutions
            repository.upsert_resolved_record(entity_key, result.record, result.provenance)
            for conflict in result.conflicts:
                repository.upsert_conflict(conflict)
            repository.append_verification_history(result.verification_entry(verified_at))
            uow.commit()
    except PersistenceFailure as exc:
        log.error("Failed to persist %s: %s", entity_key, exc)
        return PersistenceOutcome(result, exc)
    except SQLAlchemyError as exc:
        log.exception("Failed to persist %s", entity_key)
        return PersistenceOutcome(result, PersistenceFailure(entity_key, str(exc)))
    return PersistenceOutcome(result)

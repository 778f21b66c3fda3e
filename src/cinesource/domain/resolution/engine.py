"""Resolution engine: waterfall, confidence, conflicts and review in one call."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from cinesource.domain.model import (
    ProvenanceEntry,
    ResolvedRecord,
    validate_requested_fields,
)
from cinesource.domain.resolution.cache import InMemoryCacheStore, ResponseCache
from cinesource.domain.resolution.confidence import combine
from cinesource.domain.resolution.conflicts import ConflictDetector
from cinesource.domain.resolution.contracts import (
    ResolutionOptions,
    ResolutionRequest,
    ResolutionResult,
)
from cinesource.domain.resolution.fetching import SourceConsultant
from cinesource.domain.resolution.provenance import ProvenanceStore
from cinesource.domain.resolution.ratelimit import SourceRateLimiter
from cinesource.domain.resolution.review import ReviewPolicy
from cinesource.domain.resolution.waterfall import WaterfallResolver, WorkingRecord

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from cinesource.domain.model import Candidate, EntityKey, FieldName
    from cinesource.domain.resolution.contracts import CancelToken, SourceAttempt
    from cinesource.domain.resolution.registry import SourceRegistry

log = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 20


class ResolutionEngine:
    """Resolve requested fields of entities from the registered sources.

    ``resolve`` never raises for source failures: every failure degrades to "no
    candidates from this source" and the result is always best effort. Invalid
    requests (unknown fields, fields the entity type does not have) raise
    ``ValueError`` before any source is contacted.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        *,
        cache: ResponseCache | None = None,
        rate_limiter: SourceRateLimiter | None = None,
        conflict_detector: ConflictDetector | None = None,
        review_policy: ReviewPolicy | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._clock = clock or (lambda: datetime.now(UTC))
        self._registry = registry
        self._cache = cache or ResponseCache(InMemoryCacheStore(), clock=self._clock)
        self._rate_limiter = rate_limiter or SourceRateLimiter()
        self._detector = conflict_detector or ConflictDetector()
        self._review = review_policy or ReviewPolicy()
        self._concurrency = concurrency
        for source in registry:
            registration = source.registration
            self._rate_limiter.register(
                source.name,
                max_calls=registration.max_calls,
                per_seconds=registration.per_seconds,
                timeout_seconds=registration.timeout_seconds,
            )
        self._consultant = SourceConsultant(self._cache, self._rate_limiter)
        self._waterfall = WaterfallResolver(registry.primary, self._consultant)

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    async def resolve(
        self,
        entity_key: EntityKey,
        requested_fields: Iterable[FieldName | str],
        options: ResolutionOptions | None = None,
        previous: ResolvedRecord | None = None,
    ) -> ResolutionResult:
        request = ResolutionRequest(
            entity_key,
            validate_requested_fields(entity_key.entity_type, requested_fields),
            previous,
        )
        return await self._resolve(request, options or ResolutionOptions(), disabled=set())

    async def resolve_many(
        self,
        requests: Iterable[ResolutionRequest],
        *,
        options: ResolutionOptions | None = None,
        cancel_token: CancelToken | None = None,
    ) -> list[ResolutionResult]:
        """Resolve independent entities with a bounded worker pool.

        Cancellation is checked before each entity starts; entities already in
        flight finish and their results are returned in request order.
        """

        validated = [
            ResolutionRequest(
                request.entity_key,
                validate_requested_fields(request.entity_key.entity_type, request.requested_fields),
                request.previous,
            )
            for request in requests
        ]
        opts = options or ResolutionOptions()
        disabled: set[str] = set()
        workers = asyncio.Semaphore(self._concurrency)
        results: dict[int, ResolutionResult] = {}

        async def worker(index: int, request: ResolutionRequest) -> None:
            async with workers:
                if cancel_token is not None and cancel_token.cancelled:
                    return
                results[index] = await self._resolve(request, opts, disabled=disabled)

        async with asyncio.TaskGroup() as group:
            for index, request in enumerate(validated):
                group.create_task(worker(index, request))

        skipped = len(validated) - len(results)
        if skipped:
            log.info("Resolution cancelled; %d of %d entities skipped", skipped, len(validated))
        return [results[index] for index in sorted(results)]

    async def _resolve(
        self,
        request: ResolutionRequest,
        options: ResolutionOptions,
        *,
        disabled: set[str],
    ) -> ResolutionResult:
        entity_key = request.entity_key
        requested = request.requested_fields
        previous = request.previous
        prior = None if options.override else previous

        working = WorkingRecord.start(entity_key, requested, prior)
        # Each resolution owns its provenance; seeding does not count as history.
        provenance = ProvenanceStore()
        provenance.seed(
            entity_key,
            (ProvenanceEntry.for_field(name, value) for name, value in working.fields.items()),
        )
        outcome = await self._waterfall.run(
            working, options, provenance=provenance, disabled=disabled
        )
        comparison, comparison_attempts = await self._compare(working, disabled=disabled)

        combined = combine(working.fields, requested)
        settled = {name: working.fields[name] for name in requested if name in working.fields}
        report = self._detector.detect(entity_key, settled, comparison, detected_at=self._clock())
        decision = self._review.decide(
            confidence=combined.confidence,
            report=report,
            state=outcome.state,
            has_sources=outcome.successful_sources > 0 or combined.resolved_count > 0,
        )

        record = ResolvedRecord(
            entity_key=entity_key,
            fields=dict(sorted(working.fields.items())),
            confidence=combined.confidence,
            confidence_breakdown=combined.breakdown,
            low_coverage=combined.low_coverage,
            sources=tuple(working.sources),
            last_verified_at=working.last_verified_at,
            needs_manual_review=decision.needs_manual_review,
            review_reason=decision.reason,
            alignment_score=report.alignment_score,
            trust_badge=combined.badge,
        )
        result = ResolutionResult(
            record=record,
            provenance=provenance.get(entity_key),
            conflicts=report.conflicts,
            state=outcome.state,
            attempts=outcome.attempts + comparison_attempts,
            provenance_log=provenance.history(entity_key),
            confidence_before=None if previous is None else previous.confidence,
            requested_fields=requested,
        )
        log.info(
            "Resolved %s: state=%s confidence=%.4f (%s) sources=%s conflicts=%d review=%s",
            entity_key,
            result.state,
            record.confidence,
            record.trust_badge,
            record.sources_label or "-",
            len(result.conflicts),
            record.needs_manual_review,
        )
        return result

    async def _compare(
        self,
        working: WorkingRecord,
        *,
        disabled: set[str],
    ) -> tuple[tuple[Candidate, ...], tuple[SourceAttempt, ...]]:
        settled = frozenset(name for name in working.requested if name in working.fields)
        if not settled:
            return (), ()
        candidates: list[Candidate] = []
        attempts: list[SourceAttempt] = []
        for source in self._registry.comparison:
            if not source.offers_any(settled) or not source.supports(working.entity_key):
                continue
            consultation = await self._consultant.consult(
                source, working.entity_key, disabled=disabled
            )
            working.observe(consultation.fetched_at)
            attempts.append(consultation.attempt)
            candidates.extend(c for c in consultation.candidates if c.field in settled)
        return tuple(candidates), tuple(attempts)

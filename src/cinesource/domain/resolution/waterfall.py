"""Priority-ordered fetch-and-merge over the primary sources."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from cinesource.domain.model import ProvenanceEntry, ResolutionState
from cinesource.domain.resolution.contracts import AttemptOutcome

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from cinesource.domain.model import (
        Candidate,
        EntityKey,
        FieldName,
        ResolvedField,
        ResolvedRecord,
    )
    from cinesource.domain.resolution.contracts import ResolutionOptions, SourceAttempt
    from cinesource.domain.resolution.fetching import SourceConsultant
    from cinesource.domain.resolution.provenance import ProvenanceStore
    from cinesource.domain.resolution.registry import RegisteredSource

log = logging.getLogger(__name__)


def accepts(
    candidate: Candidate, current: ResolvedField | None, min_accept_confidence: float
) -> bool:
    """Merge rule: strictly stronger than what we have, and strong enough at all."""

    current_confidence = 0.0 if current is None else current.confidence
    return (
        candidate.confidence > current_confidence
        and candidate.confidence >= min_accept_confidence
    )


@dataclass(slots=True)
class WorkingRecord:
    """Mutable view of a record while the waterfall runs."""

    entity_key: EntityKey
    requested: frozenset[FieldName]
    fields: dict[FieldName, ResolvedField] = field(default_factory=dict)
    sources: list[str] = field(default_factory=list)
    last_verified_at: datetime | None = None

    @classmethod
    def start(
        cls,
        entity_key: EntityKey,
        requested: frozenset[FieldName],
        previous: ResolvedRecord | None,
    ) -> WorkingRecord:
        if previous is None:
            return cls(entity_key=entity_key, requested=requested)
        return cls(
            entity_key=entity_key,
            requested=requested,
            fields=dict(previous.fields),
            sources=list(previous.sources),
            last_verified_at=previous.last_verified_at,
        )

    def missing(self, stop_early_threshold: float) -> frozenset[FieldName]:
        return frozenset(
            name
            for name in self.requested
            if name not in self.fields or self.fields[name].confidence < stop_early_threshold
        )

    def merge(self, candidate: Candidate, min_accept_confidence: float) -> ResolvedField | None:
        if candidate.field not in self.requested:
            return None
        if not accepts(candidate, self.fields.get(candidate.field), min_accept_confidence):
            return None
        resolved = candidate.accept()
        self.fields[candidate.field] = resolved
        if candidate.source_id not in self.sources:
            self.sources.append(candidate.source_id)
        return resolved

    def observe(self, fetched_at: datetime | None) -> None:
        if fetched_at is None:
            return
        if self.last_verified_at is None or fetched_at > self.last_verified_at:
            self.last_verified_at = fetched_at


@dataclass(frozen=True, slots=True)
class WaterfallOutcome:
    state: ResolutionState
    attempts: tuple[SourceAttempt, ...]

    @property
    def successful_sources(self) -> int:
        return sum(1 for attempt in self.attempts if attempt.outcome.succeeded)


class WaterfallResolver:
    """Walks the primary sources in priority order until nothing is missing.

    Sources that offer none of the missing fields or do not support the entity
    are skipped without counting as an attempt.
    """

    def __init__(
        self,
        sources: Sequence[RegisteredSource],
        consultant: SourceConsultant,
    ) -> None:
        self._sources = tuple(sources)
        self._consultant = consultant

    async def run(
        self,
        working: WorkingRecord,
        options: ResolutionOptions,
        *,
        provenance: ProvenanceStore,
        disabled: set[str],
    ) -> WaterfallOutcome:
        entity_key = working.entity_key
        state = ResolutionState.PENDING
        attempts: list[SourceAttempt] = []
        tried = 0
        missing = working.missing(options.stop_early_threshold)

        for source in self._sources:
            if not missing:
                break
            if options.max_adapters_tried is not None and tried >= options.max_adapters_tried:
                log.debug("%s: adapter budget of %d spent", entity_key, options.max_adapters_tried)
                break
            if not source.offers_any(missing) or not source.supports(entity_key):
                continue

            consultation = await self._consultant.consult(source, entity_key, disabled=disabled)
            if consultation.attempt.outcome is not AttemptOutcome.DISABLED:
                tried += 1
            working.observe(consultation.fetched_at)

            accepted: list[FieldName] = []
            for candidate in sorted(consultation.candidates, key=lambda c: c.sort_key):
                resolved = working.merge(candidate, options.min_accept_confidence)
                if resolved is None:
                    continue
                entry = ProvenanceEntry.for_field(candidate.field, resolved)
                provenance.record(entity_key, entry)
                accepted.append(candidate.field)

            attempts.append(replace(consultation.attempt, accepted=tuple(dict.fromkeys(accepted))))
            if accepted and state is ResolutionState.PENDING:
                state = ResolutionState.PARTIALLY_RESOLVED
            missing = working.missing(options.stop_early_threshold)

        final = ResolutionState.EXHAUSTED if missing else ResolutionState.FULLY_RESOLVED
        log.debug("%s: %s -> %s after %d attempts", entity_key, state, final, len(attempts))
        return WaterfallOutcome(final, tuple(attempts))

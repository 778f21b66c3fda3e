"""Inputs and outputs of a resolution run."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from cinesource.domain.model import VerificationEntry

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from cinesource.domain.model import (
        ConflictRecord,
        EntityKey,
        FieldName,
        ProvenanceEntry,
        ResolutionState,
        ResolvedRecord,
        SourcePool,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolutionOptions:
    """Per-call knobs for ``ResolutionEngine.resolve``.

    ``stop_early_threshold``: a field resolved at or above this confidence is no
    longer searched for. ``override`` discards the previous record, which is the
    only way a field's confidence may go down.
    """

    min_accept_confidence: float = 0.0
    max_adapters_tried: int | None = None
    stop_early_threshold: float = 0.0
    override: bool = False

    def __post_init__(self) -> None:
        for name in ("min_accept_confidence", "stop_early_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.max_adapters_tried is not None and self.max_adapters_tried < 1:
            raise ValueError("max_adapters_tried must be at least 1")


class AttemptOutcome(StrEnum):
    FETCHED = "fetched"
    CACHED = "cached"
    UNAVAILABLE = "unavailable"
    RATE_LIMITED = "rate_limited"
    AUTH_FAILED = "auth_failed"
    PARSE_FAILED = "parse_failed"
    DISABLED = "disabled"

    @property
    def succeeded(self) -> bool:
        return self in {AttemptOutcome.FETCHED, AttemptOutcome.CACHED}


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceAttempt:
    """One consultation of a source while resolving an entity."""

    source_id: str
    pool: SourcePool
    outcome: AttemptOutcome
    candidates: int = 0
    accepted: tuple[FieldName, ...] = ()
    parse_errors: tuple[FieldName, ...] = ()
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class ResolutionRequest:
    entity_key: EntityKey
    requested_fields: frozenset[FieldName]
    previous: ResolvedRecord | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolutionResult:
    record: ResolvedRecord
    provenance: Mapping[FieldName, ProvenanceEntry]
    conflicts: tuple[ConflictRecord, ...]
    state: ResolutionState
    attempts: tuple[SourceAttempt, ...] = ()
    provenance_log: tuple[ProvenanceEntry, ...] = ()
    confidence_before: float | None = None
    requested_fields: frozenset[FieldName] = field(default_factory=frozenset)

    @property
    def entity_key(self) -> EntityKey:
        return self.record.entity_key

    @property
    def needs_manual_review(self) -> bool:
        return self.record.needs_manual_review

    @property
    def review_reason(self) -> str | None:
        return self.record.review_reason

    @property
    def alignment_score(self) -> float | None:
        return self.record.alignment_score

    @property
    def sources_checked(self) -> tuple[str, ...]:
        return _unique(
            attempt.source_id
            for attempt in self.attempts
            if attempt.outcome is not AttemptOutcome.DISABLED
        )

    def verification_entry(
        self, verified_at: datetime, notes: str | None = None
    ) -> VerificationEntry:
        return VerificationEntry(
            entity_key=self.entity_key,
            verified_at=verified_at,
            sources_checked=self.sources_checked,
            alignment_score=self.alignment_score,
            confidence_before=self.confidence_before,
            confidence_after=self.record.confidence,
            conflicts_found=len(self.conflicts),
            needs_review=self.needs_manual_review,
            notes=notes,
        )


class CancelToken:
    """Cooperative cancellation checked between entities of a batch."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))

"""Registered sources: provider adapters plus their priority and trust."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from cinesource.domain.model import (
    FIELD_SCHEMA,
    Candidate,
    FieldName,
    SourcePool,
    coerce_value,
)
from cinesource.domain.ports.sources import SourceParseError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator
    from datetime import timedelta

    from cinesource.domain.model import EntityKey
    from cinesource.domain.ports.sources import SourceAdapter

log = logging.getLogger(__name__)


class ConfidenceTier(float, Enum):
    """Base confidence of a source, from most to least trusted."""

    AUTHORITATIVE = 0.95
    CURATED = 0.90
    ENCYCLOPEDIC = 0.85
    REGIONAL = 0.80
    AGGREGATED = 0.75
    ARCHIVAL = 0.65
    FALLBACK = 0.50
    INFERRED = 0.35


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceRegistration:
    adapter: SourceAdapter
    priority: int
    base_confidence: float
    pool: SourcePool = SourcePool.PRIMARY
    cache_ttl: timedelta | None = None
    timeout_seconds: float | None = None
    max_calls: int | None = None
    per_seconds: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.base_confidence) <= 1.0:
            raise ValueError(f"base_confidence must be within [0, 1], got {self.base_confidence}")
        if self.max_calls is not None and self.max_calls < 1:
            raise ValueError("max_calls must be at least 1")


@dataclass(frozen=True, slots=True)
class SourceFetch:
    candidates: tuple[Candidate, ...]
    parse_errors: tuple[SourceParseError, ...]
    fetched_at: datetime


class RegisteredSource:
    """A provider adapter as the engine sees it.

    Turns raw observations into validated ``Candidate``s whose confidence is the
    source's base confidence scaled by the observation quality.
    """

    def __init__(
        self,
        registration: SourceRegistration,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._registration = registration
        self._clock = clock or (lambda: datetime.now(UTC))

    def __repr__(self) -> str:
        return f"RegisteredSource({self.name!r}, priority={self.priority}, pool={self.pool})"

    @property
    def registration(self) -> SourceRegistration:
        return self._registration

    @property
    def name(self) -> str:
        return self._registration.adapter.name

    @property
    def priority(self) -> int:
        return self._registration.priority

    @property
    def base_confidence(self) -> float:
        return float(self._registration.base_confidence)

    @property
    def pool(self) -> SourcePool:
        return self._registration.pool

    @property
    def fields(self) -> frozenset[FieldName]:
        return frozenset(self._registration.adapter.fields)

    def supports(self, entity_key: EntityKey) -> bool:
        return self._registration.adapter.supports(entity_key)

    def offers_any(self, wanted: Iterable[FieldName]) -> bool:
        return not self.fields.isdisjoint(wanted)

    async def fetch(self, entity_key: EntityKey) -> SourceFetch:
        payload = await self._registration.adapter.fetch(entity_key)
        fetched_at = payload.fetched_at or self._clock()
        allowed = FIELD_SCHEMA[entity_key.entity_type] & self.fields
        candidates: list[Candidate] = []
        errors = list(payload.parse_errors)
        for observation in payload.observations:
            if observation.field not in allowed:
                log.debug("%s: ignoring unexpected field %s", self.name, observation.field)
                continue
            try:
                value = coerce_value(observation.field, observation.value)
            except ValueError as exc:
                errors.append(SourceParseError(self.name, str(exc), field=observation.field))
                continue
            candidates.append(
                Candidate(
                    field=observation.field,
                    value=value,
                    confidence=round(self.base_confidence * observation.quality, 4),
                    source_id=self.name,
                    fetched_at=fetched_at,
                )
            )
        for error in errors:
            log.debug("%s: field-level parse error: %s", self.name, error)
        candidates.sort(key=lambda candidate: candidate.sort_key)
        return SourceFetch(tuple(candidates), tuple(errors), fetched_at)


class SourceRegistry:
    """Ordered collection of registered sources split by pool."""

    def __init__(
        self,
        registrations: Iterable[SourceRegistration],
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        sources = [RegisteredSource(registration, clock=clock) for registration in registrations]
        names = [source.name for source in sources]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate source names: {', '.join(duplicates)}")
        ordered = sorted(sources, key=lambda source: (source.priority, source.name))
        self._primary = tuple(s for s in ordered if s.pool is SourcePool.PRIMARY)
        self._comparison = tuple(s for s in ordered if s.pool is SourcePool.COMPARISON)

    @property
    def primary(self) -> tuple[RegisteredSource, ...]:
        return self._primary

    @property
    def comparison(self) -> tuple[RegisteredSource, ...]:
        return self._comparison

    def __iter__(self) -> Iterator[RegisteredSource]:
        return iter(self._primary + self._comparison)

    def __len__(self) -> int:
        return len(self._primary) + len(self._comparison)

"""Overall confidence, per-field breakdown and trust badges."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cinesource.domain.model import FieldBreakdown, TrustBadge

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping

    from cinesource.domain.model import FieldName, ResolvedField

CONFIDENCE_PRECISION = 4

_BADGE_FLOORS: tuple[tuple[float, TrustBadge], ...] = (
    (0.90, TrustBadge.VERIFIED),
    (0.70, TrustBadge.HIGH),
    (0.50, TrustBadge.MEDIUM),
    (0.30, TrustBadge.LOW),
)


@dataclass(frozen=True, slots=True)
class CombinedConfidence:
    confidence: float
    breakdown: dict[FieldName, FieldBreakdown]
    resolved_count: int
    low_coverage: bool

    @property
    def badge(self) -> TrustBadge:
        return trust_badge(self.confidence)


def combine(
    fields: Mapping[FieldName, ResolvedField],
    requested: Collection[FieldName],
) -> CombinedConfidence:
    """Average field confidence over the requested fields; unresolved fields count as 0."""

    if not requested:
        raise ValueError("requested must not be empty")
    total = sum(fields[name].confidence for name in requested if name in fields)
    resolved_count = sum(1 for name in requested if name in fields)
    breakdown = {
        name: FieldBreakdown(resolved.confidence, resolved.source_id)
        for name, resolved in sorted(fields.items())
    }
    return CombinedConfidence(
        confidence=round(total / len(requested), CONFIDENCE_PRECISION),
        breakdown=breakdown,
        resolved_count=resolved_count,
        low_coverage=resolved_count < len(requested) / 2,
    )


def trust_badge(confidence: float) -> TrustBadge:
    for floor, badge in _BADGE_FLOORS:
        if confidence >= floor:
            return badge
    return TrustBadge.UNVERIFIED

"""Resolved records: the merged, confidence-scored view of an entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from cinesource.domain.model.candidate import ResolvedField
from cinesource.domain.model.entity import EntityKey
from cinesource.domain.model.enums import TrustBadge
from cinesource.domain.model.fields import FieldName

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cinesource.domain.model.fields import FieldValue

SOURCE_SEPARATOR = "+"


@dataclass(frozen=True, slots=True)
class FieldBreakdown:
    confidence: float
    source_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"confidence": self.confidence, "source_id": self.source_id}


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolvedRecord:
    """Outcome of resolving one entity.

    A record is never edited in place: a later run produces a new record that
    supersedes it. ``sources`` lists every source that contributed an accepted
    value, in the order they first contributed.
    """

    entity_key: EntityKey
    fields: Mapping[FieldName, ResolvedField] = field(default_factory=dict)
    confidence: float = 0.0
    confidence_breakdown: Mapping[FieldName, FieldBreakdown] = field(default_factory=dict)
    low_coverage: bool = True
    sources: tuple[str, ...] = ()
    last_verified_at: datetime | None = None
    needs_manual_review: bool = False
    review_reason: str | None = None
    alignment_score: float | None = None
    trust_badge: TrustBadge = TrustBadge.UNVERIFIED

    @classmethod
    def empty(cls, entity_key: EntityKey) -> ResolvedRecord:
        return cls(entity_key=entity_key)

    @property
    def sources_label(self) -> str:
        return SOURCE_SEPARATOR.join(self.sources)

    def confidence_of(self, name: FieldName) -> float:
        resolved = self.fields.get(name)
        return 0.0 if resolved is None else resolved.confidence

    def value_of(self, name: FieldName) -> FieldValue | None:
        resolved = self.fields.get(name)
        return None if resolved is None else resolved.value

    # serialization -----------------------------------------------------------

    def to_payload(self) -> dict[str, Any]:
        """JSON-compatible representation with deterministic key order."""

        return {
            "entity_key": self.entity_key.to_dict(),
            "fields": {
                name.value: {
                    "value": resolved.value,
                    "confidence": resolved.confidence,
                    "source_id": resolved.source_id,
                    "fetched_at": resolved.fetched_at.isoformat(),
                }
                for name, resolved in sorted(self.fields.items())
            },
            "confidence": self.confidence,
            "confidence_breakdown": self.breakdown_payload(),
            "low_coverage": self.low_coverage,
            "sources": list(self.sources),
            "last_verified_at": (
                None if self.last_verified_at is None else self.last_verified_at.isoformat()
            ),
            "needs_manual_review": self.needs_manual_review,
            "review_reason": self.review_reason,
            "alignment_score": self.alignment_score,
            "trust_badge": self.trust_badge.value,
        }

    def breakdown_payload(self) -> dict[str, dict[str, Any]]:
        return {
            name.value: entry.to_dict() for name, entry in sorted(self.confidence_breakdown.items())
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ResolvedRecord:
        fields = {
            FieldName(name): ResolvedField(
                value=data["value"],
                confidence=float(data["confidence"]),
                source_id=data["source_id"],
                fetched_at=datetime.fromisoformat(data["fetched_at"]),
            )
            for name, data in payload.get("fields", {}).items()
        }
        breakdown = {
            FieldName(name): FieldBreakdown(float(data["confidence"]), data["source_id"])
            for name, data in payload.get("confidence_breakdown", {}).items()
        }
        last_verified = payload.get("last_verified_at")
        last_verified_at = None if last_verified is None else datetime.fromisoformat(last_verified)
        return cls(
            entity_key=EntityKey.from_dict(payload["entity_key"]),
            fields=fields,
            confidence=float(payload.get("confidence", 0.0)),
            confidence_breakdown=breakdown,
            low_coverage=bool(payload.get("low_coverage", True)),
            sources=tuple(payload.get("sources", ())),
            last_verified_at=last_verified_at,
            needs_manual_review=bool(payload.get("needs_manual_review", False)),
            review_reason=payload.get("review_reason"),
            alignment_score=payload.get("alignment_score"),
            trust_badge=TrustBadge(payload.get("trust_badge", TrustBadge.UNVERIFIED)),
        )

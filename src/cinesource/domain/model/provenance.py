from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from cinesource.domain.model.fields import FieldName

if TYPE_CHECKING:
    from cinesource.domain.model.candidate import ResolvedField


@dataclass(frozen=True, slots=True, kw_only=True)
class ProvenanceEntry:
    """Which source supplied a field's accepted value, and when."""

    field: FieldName
    source_id: str
    confidence: float
    fetched_at: datetime

    @classmethod
    def for_field(cls, field: FieldName, resolved: ResolvedField) -> ProvenanceEntry:
        return cls(
            field=field,
            source_id=resolved.source_id,
            confidence=resolved.confidence,
            fetched_at=resolved.fetched_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_id": self.source_id,
            "confidence": self.confidence,
            "fetched_at": self.fetched_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, field: str, data: dict[str, Any]) -> ProvenanceEntry:
        return cls(
            field=FieldName(field),
            source_id=data["source_id"],
            confidence=float(data["confidence"]),
            fetched_at=datetime.fromisoformat(data["fetched_at"]),
        )

"""Candidate values proposed by sources and the accepted field values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from cinesource.domain.model.fields import FieldName, FieldValue


def _check_confidence(confidence: float) -> None:
    if not 0.0 <= confidence <= 1.0:
        raise ValueError(f"confidence must be within [0, 1], got {confidence}")


@dataclass(frozen=True, slots=True, kw_only=True)
class Candidate:
    """A single value for one field proposed by one source."""

    field: FieldName
    value: FieldValue
    confidence: float
    source_id: str
    fetched_at: datetime

    def __post_init__(self) -> None:
        _check_confidence(self.confidence)

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.field.value, str(self.value))

    def accept(self) -> ResolvedField:
        return ResolvedField(
            value=self.value,
            confidence=self.confidence,
            source_id=self.source_id,
            fetched_at=self.fetched_at,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolvedField:
    """The accepted value for a field, replaced only by a stronger candidate."""

    value: FieldValue
    confidence: float
    source_id: str
    fetched_at: datetime

    def __post_init__(self) -> None:
        _check_confidence(self.confidence)

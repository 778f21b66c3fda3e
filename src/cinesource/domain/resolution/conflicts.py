"""Compare settled values against comparison-only sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cinesource.domain.model import ConflictRecord, Severity, ValueKind
from cinesource.domain.resolution.similarity import text_similarity

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from cinesource.domain.model import (
        Candidate,
        EntityKey,
        FieldName,
        FieldValue,
        ResolvedField,
    )


@dataclass(frozen=True, slots=True)
class ConflictThresholds:
    """Severity cut-offs per value kind.

    Years: any difference beyond ``year_tolerance`` is high. Numbers: relative
    difference at or above ``numeric_high``/``numeric_medium``. Text: similarity
    below ``text_high``/``text_medium``.
    """

    year_tolerance: int = 0
    text_high: float = 0.5
    text_medium: float = 0.8
    numeric_high: float = 0.25
    numeric_medium: float = 0.10

    def __post_init__(self) -> None:
        if self.year_tolerance < 0:
            raise ValueError("year_tolerance must not be negative")
        if not 0.0 <= self.text_high <= self.text_medium <= 1.0:
            raise ValueError("text thresholds must satisfy 0 <= text_high <= text_medium <= 1")
        if not 0.0 <= self.numeric_medium <= self.numeric_high:
            raise ValueError("numeric thresholds must satisfy 0 <= numeric_medium <= numeric_high")


@dataclass(frozen=True, slots=True)
class Assessment:
    divergence: float
    severity: Severity


@dataclass(frozen=True, slots=True)
class ConflictReport:
    conflicts: tuple[ConflictRecord, ...]
    compared: int
    agreeing: int

    @property
    def alignment_score(self) -> float | None:
        if self.compared == 0:
            return None
        return round(self.agreeing / self.compared, 4)


def assess(
    kind: ValueKind,
    primary: FieldValue,
    comparison: FieldValue,
    thresholds: ConflictThresholds,
) -> Assessment | None:
    """Grade a disagreement; ``None`` when the kind is not compared."""

    match kind:
        case ValueKind.URL:
            return None
        case ValueKind.YEAR:
            gap = abs(int(primary) - int(comparison))
            severity = Severity.HIGH if gap > thresholds.year_tolerance else Severity.LOW
            return Assessment(float(gap), severity)
        case ValueKind.INTEGER | ValueKind.DECIMAL:
            return _assess_numeric(float(primary), float(comparison), thresholds)
        case ValueKind.TEXT:
            similarity = text_similarity(str(primary), str(comparison))
            if similarity < thresholds.text_high:
                severity = Severity.HIGH
            elif similarity < thresholds.text_medium:
                severity = Severity.MEDIUM
            else:
                severity = Severity.LOW
            return Assessment(round(1.0 - similarity, 4), severity)


def _assess_numeric(
    primary: float, comparison: float, thresholds: ConflictThresholds
) -> Assessment:
    scale = max(abs(primary), abs(comparison))
    relative = 0.0 if scale == 0 else abs(primary - comparison) / scale
    if relative >= thresholds.numeric_high:
        severity = Severity.HIGH
    elif relative >= thresholds.numeric_medium:
        severity = Severity.MEDIUM
    else:
        severity = Severity.LOW
    return Assessment(round(relative, 4), severity)


class ConflictDetector:
    """Pure function of the settled fields and the comparison candidates."""

    def __init__(self, thresholds: ConflictThresholds | None = None) -> None:
        self._thresholds = thresholds or ConflictThresholds()

    @property
    def thresholds(self) -> ConflictThresholds:
        return self._thresholds

    def detect(
        self,
        entity_key: EntityKey,
        fields: Mapping[FieldName, ResolvedField],
        comparison: Iterable[Candidate],
        *,
        detected_at: datetime,
    ) -> ConflictReport:
        conflicts: list[ConflictRecord] = []
        compared = 0
        agreeing = 0
        ordered = sorted(comparison, key=lambda c: (c.field.value, c.source_id, str(c.value)))
        for candidate in ordered:
            settled = fields.get(candidate.field)
            if settled is None:
                continue
            assessment = assess(
                candidate.field.kind, settled.value, candidate.value, self._thresholds
            )
            if assessment is None:
                continue
            compared += 1
            if assessment.severity is Severity.LOW:
                agreeing += 1
                continue
            conflicts.append(
                ConflictRecord(
                    entity_key=entity_key,
                    field=candidate.field,
                    primary_source_id=settled.source_id,
                    primary_value=settled.value,
                    comparison_source_id=candidate.source_id,
                    comparison_value=candidate.value,
                    severity=assessment.severity,
                    divergence=assessment.divergence,
                    detected_at=detected_at,
                )
            )
        return ConflictReport(tuple(conflicts), compared, agreeing)

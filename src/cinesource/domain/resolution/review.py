"""Decide whether a resolved record needs a human to look at it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cinesource.domain.model import ResolutionState, Severity, ValueKind

if TYPE_CHECKING:
    from cinesource.domain.model import ConflictRecord
    from cinesource.domain.resolution.conflicts import ConflictReport

NO_SOURCES_REASON = "no sources available"
REASON_SEPARATOR = "; "
DEFAULT_CONFLICT_LIMIT = 2


@dataclass(frozen=True, slots=True)
class ReviewDecision:
    needs_manual_review: bool
    reason: str | None


@dataclass(frozen=True, slots=True)
class ReviewPolicy:
    """Flags a record for review when any of these hold:

    - an unresolved conflict is high severity, or is on a text field (every
      text conflict already means similarity below the medium cut-off);
    - ``conflict_limit`` or more conflicts are unresolved;
    - the primary sources are exhausted and confidence is below ``review_floor``.
    """

    review_floor: float = 0.5
    conflict_limit: int = DEFAULT_CONFLICT_LIMIT

    def __post_init__(self) -> None:
        if not 0.0 <= self.review_floor <= 1.0:
            raise ValueError(f"review_floor must be within [0, 1], got {self.review_floor}")
        if self.conflict_limit < 1:
            raise ValueError("conflict_limit must be at least 1")

    def decide(
        self,
        *,
        confidence: float,
        report: ConflictReport,
        state: ResolutionState,
        has_sources: bool,
    ) -> ReviewDecision:
        if not has_sources:
            return ReviewDecision(True, NO_SOURCES_REASON)
        unresolved = [conflict for conflict in report.conflicts if not conflict.resolved]
        reasons = [conflict.describe() for conflict in unresolved if _always_reviewed(conflict)]
        if len(unresolved) >= self.conflict_limit:
            reasons.append(f"{len(unresolved)} unresolved conflicts")
        if state is ResolutionState.EXHAUSTED and confidence < self.review_floor:
            reasons.append(
                f"confidence {confidence:.4f} below review floor {self.review_floor:.2f}"
            )
        if not reasons:
            return ReviewDecision(False, None)
        return ReviewDecision(True, REASON_SEPARATOR.join(reasons))


def _always_reviewed(conflict: ConflictRecord) -> bool:
    return conflict.severity is Severity.HIGH or conflict.field.kind is ValueKind.TEXT

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from cinesource.domain.model.entity import EntityKey


@dataclass(frozen=True, slots=True, kw_only=True)
class VerificationEntry:
    """Append-only audit row written after every resolution run."""

    entity_key: EntityKey
    verified_at: datetime
    sources_checked: tuple[str, ...]
    alignment_score: float | None
    confidence_before: float | None
    confidence_after: float
    conflicts_found: int
    needs_review: bool
    notes: str | None = None

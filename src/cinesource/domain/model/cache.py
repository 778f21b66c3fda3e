from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from cinesource.domain.model.candidate import Candidate


@dataclass(frozen=True, slots=True, kw_only=True)
class CacheEntry:
    """Last successful payload of one source for one entity."""

    source_id: str
    entity_key: str
    payload: tuple[Candidate, ...]
    fetched_at: datetime
    expires_at: datetime

    def __post_init__(self) -> None:
        if self.expires_at < self.fetched_at:
            raise ValueError("expires_at must not precede fetched_at")

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

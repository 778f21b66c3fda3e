"""Ports for persisting resolution results."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cinesource.domain.model import (
        CacheEntry,
        ConflictRecord,
        EntityKey,
        FieldName,
        ProvenanceEntry,
        ResolvedRecord,
        VerificationEntry,
    )


class PersistenceFailure(RuntimeError):
    """A repository write failed. Reported to the caller, never fatal to resolution."""

    def __init__(self, entity_key: EntityKey, message: str) -> None:
        super().__init__(f"{entity_key}: {message}")
        self.entity_key = entity_key


@runtime_checkable
class ResolutionRepository(Protocol):
    """Persistence contract for resolved records and their audit trail."""

    def get_resolved_record(self, entity_key: EntityKey) -> ResolvedRecord | None: ...

    def upsert_resolved_record(
        self,
        entity_key: EntityKey,
        record: ResolvedRecord,
        provenance: Mapping[FieldName, ProvenanceEntry],
    ) -> None: ...

    def upsert_conflict(self, conflict: ConflictRecord) -> None: ...

    def upsert_cache_entry(self, entry: CacheEntry) -> None: ...

    def append_verification_history(self, entry: VerificationEntry) -> None: ...


__all__ = ["PersistenceFailure", "ResolutionRepository"]

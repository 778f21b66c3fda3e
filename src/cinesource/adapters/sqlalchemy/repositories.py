"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from cinesource.adapters.sqlalchemy.mappings import (
    conflict_table,
    resolved_record_table,
    response_cache_table,
    verification_history_table,
)
from cinesource.domain.model import (
    SOURCE_SEPARATOR,
    CacheEntry,
    Candidate,
    ConflictRecord,
    EntityKey,
    FieldName,
    ResolvedRecord,
    Severity,
    VerificationEntry,
)
from cinesource.domain.ports.cache import CacheStoreError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from sqlalchemy import Table
    from sqlalchemy.orm import Session

    from cinesource.domain.model import ProvenanceEntry

log = getLogger(__name__)


def _upsert(session: Session, table: Table) -> Any:
    """Dialect-specific ``INSERT`` supporting ``on_conflict_do_update``."""

    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upserts are not implemented for dialect {dialect!r}")


def candidate_to_dict(candidate: Candidate) -> dict[str, Any]:
    return {
        "field": candidate.field.value,
        "value": candidate.value,
        "confidence": candidate.confidence,
        "source_id": candidate.source_id,
        "fetched_at": candidate.fetched_at.isoformat(),
    }


def candidate_from_dict(data: Mapping[str, Any]) -> Candidate:
    return Candidate(
        field=FieldName(data["field"]),
        value=data["value"],
        confidence=float(data["confidence"]),
        source_id=data["source_id"],
        fetched_at=datetime.fromisoformat(data["fetched_at"]),
    )


class SqlAlchemyResolutionRepository:
    def __init__(self, session: Session, *, clock: Callable[[], datetime] | None = None) -> None:
        self.session = session
        self._clock = clock or (lambda: datetime.now(UTC))

    # resolved records --------------------------------------------------------

    def get_resolved_record(self, entity_key: EntityKey) -> ResolvedRecord | None:
        stmt = select(resolved_record_table).where(
            resolved_record_table.c.entity_key == entity_key.cache_key
        )
        row = self.session.execute(stmt).mappings().one_or_none()
        if row is None:
            return None
        return self._record_from_row(row)

    def get_provenance(self, entity_key: EntityKey) -> dict[str, dict[str, Any]]:
        stmt = select(resolved_record_table.c.field_provenance).where(
            resolved_record_table.c.entity_key == entity_key.cache_key
        )
        return dict(self.session.execute(stmt).scalar_one_or_none() or {})

    def upsert_resolved_record(
        self,
        entity_key: EntityKey,
        record: ResolvedRecord,
        provenance: Mapping[FieldName, ProvenanceEntry],
    ) -> None:
        payload = record.to_payload()
        values = {
            "entity_key": entity_key.cache_key,
            "entity_type": entity_key.entity_type,
            "title": entity_key.title,
            "year": entity_key.year,
            "identity": entity_key.to_dict(),
            "fields": payload["fields"],
            "confidence": record.confidence,
            "confidence_breakdown": record.breakdown_payload(),
            "field_provenance": {
                name.value: entry.to_dict() for name, entry in sorted(provenance.items())
            },
            "low_coverage": record.low_coverage,
            "sources": record.sources_label,
            "alignment_score": record.alignment_score,
            "trust_badge": record.trust_badge.value,
            "needs_manual_review": record.needs_manual_review,
            "review_reason": record.review_reason,
            "last_verified_at": record.last_verified_at,
            "updated_at": self._clock(),
        }
        stmt = _upsert(self.session, resolved_record_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[resolved_record_table.c.entity_key],
            set_={key: value for key, value in values.items() if key != "entity_key"},
        )
        self.session.execute(stmt)

    # conflicts ---------------------------------------------------------------

    def upsert_conflict(self, conflict: ConflictRecord) -> None:
        """Insert a conflict, or refresh severity of one already on file.

        A conflict a reviewer already resolved stays resolved.
        """

        values = {
            "entity_key": conflict.entity_key.cache_key,
            "field": conflict.field.value,
            "primary_source": conflict.primary_source_id,
            "primary_value": conflict.primary_value,
            "comparison_source": conflict.comparison_source_id,
            "comparison_value": conflict.comparison_value,
            "severity": conflict.severity,
            "divergence": conflict.divergence,
            "resolved": conflict.resolved,
            "detected_at": conflict.detected_at,
        }
        stmt = _upsert(self.session, conflict_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                conflict_table.c.entity_key,
                conflict_table.c.field,
                conflict_table.c.comparison_source,
                conflict_table.c.primary_value,
                conflict_table.c.comparison_value,
            ],
            set_={
                "primary_source": stmt.excluded.primary_source,
                "severity": stmt.excluded.severity,
                "divergence": stmt.excluded.divergence,
                "detected_at": stmt.excluded.detected_at,
            },
        )
        self.session.execute(stmt)

    def list_conflicts(
        self, entity_key: EntityKey, *, include_resolved: bool = False
    ) -> list[ConflictRecord]:
        stmt = (
            select(conflict_table)
            .where(conflict_table.c.entity_key == entity_key.cache_key)
            .order_by(conflict_table.c.field, conflict_table.c.comparison_source)
        )
        if not include_resolved:
            stmt = stmt.where(conflict_table.c.resolved.is_(False))
        return [
            ConflictRecord(
                entity_key=entity_key,
                field=FieldName(row["field"]),
                primary_source_id=row["primary_source"],
                primary_value=row["primary_value"],
                comparison_source_id=row["comparison_source"],
                comparison_value=row["comparison_value"],
                severity=Severity(row["severity"]),
                divergence=row["divergence"],
                detected_at=row["detected_at"],
                resolved=row["resolved"],
            )
            for row in self.session.execute(stmt).mappings()
        ]

    # cache -------------------------------------------------------------------

    def upsert_cache_entry(self, entry: CacheEntry) -> None:
        values = {
            "source_id": entry.source_id,
            "entity_key": entry.entity_key,
            "payload": [candidate_to_dict(candidate) for candidate in entry.payload],
            "fetched_at": entry.fetched_at,
            "expires_at": entry.expires_at,
        }
        stmt = _upsert(self.session, response_cache_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[response_cache_table.c.source_id, response_cache_table.c.entity_key],
            set_={
                "payload": stmt.excluded.payload,
                "fetched_at": stmt.excluded.fetched_at,
                "expires_at": stmt.excluded.expires_at,
            },
        )
        self.session.execute(stmt)

    def get_cache_entry(self, source_id: str, entity_key: str) -> CacheEntry | None:
        stmt = select(response_cache_table).where(
            response_cache_table.c.source_id == source_id,
            response_cache_table.c.entity_key == entity_key,
        )
        row = self.session.execute(stmt).mappings().one_or_none()
        if row is None:
            return None
        return CacheEntry(
            source_id=row["source_id"],
            entity_key=row["entity_key"],
            payload=tuple(candidate_from_dict(item) for item in row["payload"]),
            fetched_at=row["fetched_at"],
            expires_at=row["expires_at"],
        )

    def delete_cache_entry(self, source_id: str, entity_key: str) -> None:
        self.session.execute(
            delete(response_cache_table).where(
                response_cache_table.c.source_id == source_id,
                response_cache_table.c.entity_key == entity_key,
            )
        )

    def delete_expired_cache_entries(self, now: datetime) -> int:
        result = self.session.execute(
            delete(response_cache_table).where(response_cache_table.c.expires_at <= now)
        )
        return result.rowcount or 0

    # verification history ----------------------------------------------------

    def append_verification_history(self, entry: VerificationEntry) -> None:
        self.session.execute(
            verification_history_table.insert().values(
                entity_key=entry.entity_key.cache_key,
                verified_at=entry.verified_at,
                sources_checked=list(entry.sources_checked),
                alignment_score=entry.alignment_score,
                confidence_before=entry.confidence_before,
                confidence_after=entry.confidence_after,
                conflicts_found=entry.conflicts_found,
                needs_review=entry.needs_review,
                notes=entry.notes,
            )
        )

    def verification_history(self, entity_key: EntityKey) -> list[VerificationEntry]:
        stmt = (
            select(verification_history_table)
            .where(verification_history_table.c.entity_key == entity_key.cache_key)
            .order_by(verification_history_table.c.id)
        )
        return [
            VerificationEntry(
                entity_key=entity_key,
                verified_at=row["verified_at"],
                sources_checked=tuple(row["sources_checked"]),
                alignment_score=row["alignment_score"],
                confidence_before=row["confidence_before"],
                confidence_after=row["confidence_after"],
                conflicts_found=row["conflicts_found"],
                needs_review=row["needs_review"],
                notes=row["notes"],
            )
            for row in self.session.execute(stmt).mappings()
        ]

    @staticmethod
    def _record_from_row(row: Mapping[str, Any]) -> ResolvedRecord:
        last_verified_at = row["last_verified_at"]
        return ResolvedRecord.from_payload(
            {
                "entity_key": row["identity"],
                "fields": row["fields"],
                "confidence": row["confidence"],
                "confidence_breakdown": row["confidence_breakdown"],
                "low_coverage": row["low_coverage"],
                "sources": [source for source in row["sources"].split(SOURCE_SEPARATOR) if source],
                "last_verified_at": (
                    None if last_verified_at is None else last_verified_at.isoformat()
                ),
                "needs_manual_review": row["needs_manual_review"],
                "review_reason": row["review_reason"],
                "alignment_score": row["alignment_score"],
                "trust_badge": row["trust_badge"],
            }
        )


class SqlAlchemyCacheStore:
    """``CacheStore`` on the ``response_cache`` table, one short session per call."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def load(self, source_id: str, entity_key: str) -> CacheEntry | None:
        try:
            with self._session_factory() as session:
                repository = SqlAlchemyResolutionRepository(session)
                return repository.get_cache_entry(source_id, entity_key)
        except SQLAlchemyError as exc:
            raise CacheStoreError(f"Could not read cache entry {source_id}/{entity_key}") from exc

    def save(self, entry: CacheEntry) -> None:
        try:
            with self._session_factory() as session, session.begin():
                SqlAlchemyResolutionRepository(session).upsert_cache_entry(entry)
        except SQLAlchemyError as exc:
            raise CacheStoreError(
                f"Could not write cache entry {entry.source_id}/{entry.entity_key}"
            ) from exc

    def delete(self, source_id: str, entity_key: str) -> None:
        try:
            with self._session_factory() as session, session.begin():
                SqlAlchemyResolutionRepository(session).delete_cache_entry(source_id, entity_key)
        except SQLAlchemyError as exc:
            raise CacheStoreError(f"Could not delete cache entry {source_id}/{entity_key}") from exc

    def purge_expired(self, now: datetime) -> int:
        try:
            with self._session_factory() as session, session.begin():
                removed = SqlAlchemyResolutionRepository(session).delete_expired_cache_entries(now)
        except SQLAlchemyError as exc:
            raise CacheStoreError("Could not purge expired cache entries") from exc
        log.debug("Purged %d expired cache rows", removed)
        return removed

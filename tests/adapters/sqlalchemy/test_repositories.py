from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from typing import TYPE_CHECKING

from cinesource.adapters.sqlalchemy import SqlAlchemyResolutionRepository
from cinesource.domain.model import (
    CacheEntry,
    Candidate,
    ConflictRecord,
    EntityKey,
    FieldBreakdown,
    FieldName,
    ProvenanceEntry,
    ResolvedField,
    ResolvedRecord,
    Severity,
    TrustBadge,
    VerificationEntry,
)
from tests.helpers.sources import FIXED_NOW

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

HEAT = EntityKey.film("Heat", 1995, tmdb_id=949)


def _repository(session: Session) -> SqlAlchemyResolutionRepository:
    return SqlAlchemyResolutionRepository(session, clock=lambda: FIXED_NOW)


def _record(confidence: float = 0.95, director: str = "Michael Mann") -> ResolvedRecord:
    return ResolvedRecord(
        entity_key=HEAT,
        fields={
            FieldName.DIRECTOR: ResolvedField(
                value=director, confidence=confidence, source_id="tmdb", fetched_at=FIXED_NOW
            ),
            FieldName.RELEASE_YEAR: ResolvedField(
                value=1995, confidence=confidence, source_id="tmdb", fetched_at=FIXED_NOW
            ),
        },
        confidence=confidence,
        confidence_breakdown={
            FieldName.DIRECTOR: FieldBreakdown(confidence, "tmdb"),
            FieldName.RELEASE_YEAR: FieldBreakdown(confidence, "tmdb"),
        },
        low_coverage=False,
        sources=("tmdb",),
        last_verified_at=FIXED_NOW,
        alignment_score=1.0,
        trust_badge=TrustBadge.VERIFIED,
    )


def _conflict(severity: Severity = Severity.HIGH) -> ConflictRecord:
    return ConflictRecord(
        entity_key=HEAT,
        field=FieldName.RELEASE_YEAR,
        primary_source_id="tmdb",
        primary_value=1995,
        comparison_source_id="omdb",
        comparison_value=1996,
        severity=severity,
        divergence=1.0,
        detected_at=FIXED_NOW,
    )


def test_resolved_record_round_trip(sqlite_session: Session) -> None:
    repository = _repository(sqlite_session)
    record = _record()
    provenance = {
        name: ProvenanceEntry.for_field(name, resolved) for name, resolved in record.fields.items()
    }

    repository.upsert_resolved_record(HEAT, record, provenance)
    sqlite_session.commit()

    assert repository.get_resolved_record(HEAT) == record
    assert repository.get_provenance(HEAT)["director"]["source_id"] == "tmdb"
    assert repository.get_resolved_record(EntityKey.film("Thief", 1981)) is None


def test_resolved_record_upsert_replaces_row(sqlite_session: Session) -> None:
    repository = _repository(sqlite_session)
    repository.upsert_resolved_record(HEAT, _record(0.8, "M. Mann"), {})
    repository.upsert_resolved_record(HEAT, _record(0.95), {})
    sqlite_session.commit()

    stored = repository.get_resolved_record(HEAT)

    assert stored is not None
    assert stored.confidence == 0.95
    assert stored.value_of(FieldName.DIRECTOR) == "Michael Mann"


def test_conflict_upsert_refreshes_but_keeps_resolution(sqlite_session: Session) -> None:
    repository = _repository(sqlite_session)
    repository.upsert_conflict(replace(_conflict(Severity.MEDIUM), resolved=True))
    repository.upsert_conflict(_conflict(Severity.HIGH))
    sqlite_session.commit()

    assert repository.list_conflicts(HEAT) == []
    (stored,) = repository.list_conflicts(HEAT, include_resolved=True)
    assert stored.severity is Severity.HIGH
    assert stored.resolved is True
    assert stored.primary_value == 1995
    assert stored.comparison_value == 1996


def test_conflicts_with_different_values_are_separate(sqlite_session: Session) -> None:
    repository = _repository(sqlite_session)
    repository.upsert_conflict(_conflict())
    repository.upsert_conflict(
        ConflictRecord(
            entity_key=HEAT,
            field=FieldName.DIRECTOR,
            primary_source_id="tmdb",
            primary_value="Michael Mann",
            comparison_source_id="omdb",
            comparison_value="Ridley Scott",
            severity=Severity.HIGH,
            divergence=0.7,
            detected_at=FIXED_NOW,
        )
    )
    sqlite_session.commit()

    assert [c.field for c in repository.list_conflicts(HEAT)] == [
        FieldName.DIRECTOR,
        FieldName.RELEASE_YEAR,
    ]


def test_cache_entry_round_trip_and_expiry(sqlite_session: Session) -> None:
    repository = _repository(sqlite_session)
    candidate = Candidate(
        field=FieldName.RUNTIME_MINUTES,
        value=170,
        confidence=0.95,
        source_id="tmdb",
        fetched_at=FIXED_NOW,
    )
    entry = CacheEntry(
        source_id="tmdb",
        entity_key=HEAT.cache_key,
        payload=(candidate,),
        fetched_at=FIXED_NOW,
        expires_at=FIXED_NOW + timedelta(days=30),
    )

    repository.upsert_cache_entry(entry)
    repository.upsert_cache_entry(entry)
    sqlite_session.commit()

    assert repository.get_cache_entry("tmdb", HEAT.cache_key) == entry
    assert repository.delete_expired_cache_entries(FIXED_NOW + timedelta(days=29)) == 0
    assert repository.delete_expired_cache_entries(FIXED_NOW + timedelta(days=30)) == 1
    assert repository.get_cache_entry("tmdb", HEAT.cache_key) is None


def test_verification_history_is_append_only(sqlite_session: Session) -> None:
    repository = _repository(sqlite_session)
    for index, confidence in enumerate((0.5, 0.9)):
        repository.append_verification_history(
            VerificationEntry(
                entity_key=HEAT,
                verified_at=FIXED_NOW + timedelta(days=index),
                sources_checked=("tmdb", "omdb"),
                alignment_score=1.0,
                confidence_before=None if index == 0 else 0.5,
                confidence_after=confidence,
                conflicts_found=0,
                needs_review=False,
            )
        )
    sqlite_session.commit()

    history = repository.verification_history(HEAT)

    assert [entry.confidence_after for entry in history] == [0.5, 0.9]
    assert history[1].verified_at == FIXED_NOW + timedelta(days=1)
    assert history[0].sources_checked == ("tmdb", "omdb")

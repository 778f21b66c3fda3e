"""SQLAlchemy table metadata for resolution results."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
)

from cinesource.domain.model import EntityType, Severity, TrustBadge

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from cinesource.domain.model import FieldValue

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class FieldValueType(TypeDecorator["FieldValue"]):
    """Scalar field value stored as JSON text so it can take part in unique keys."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: FieldValue | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)

    def process_result_value(self, value: str | None, dialect: Dialect) -> FieldValue | None:
        _ = dialect
        if value is None:
            return None
        loaded = json.loads(value)
        if isinstance(loaded, str | int | float) and not isinstance(loaded, bool):
            return loaded
        raise ValueError(f"Stored field value is not a scalar: {value!r}")


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# Core tables -----------------------------------------------------------------

resolved_record_table = Table(
    "resolved_record",
    metadata,
    Column("entity_key", String, primary_key=True),
    Column("entity_type", Enum(EntityType, native_enum=False), nullable=False),
    Column("title", String, nullable=False),
    Column("year", Integer, nullable=True),
    Column("identity", JSON, nullable=False),
    Column("fields", JSON, nullable=False),
    Column("confidence", Float, nullable=False),
    Column("confidence_breakdown", JSON, nullable=False),
    Column("field_provenance", JSON, nullable=False),
    Column("low_coverage", Boolean, nullable=False),
    Column("sources", String, nullable=False),
    Column("alignment_score", Float, nullable=True),
    Column("trust_badge", String, nullable=False, default=TrustBadge.UNVERIFIED.value),
    Column("needs_manual_review", Boolean, nullable=False, default=False),
    Column("review_reason", String, nullable=True),
    Column("last_verified_at", UTCDateTime, nullable=True),
    Column("updated_at", UTCDateTime, nullable=False),
)

conflict_table = Table(
    "resolution_conflict",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("entity_key", String, nullable=False),
    Column("field", String, nullable=False),
    Column("primary_source", String, nullable=False),
    Column("primary_value", FieldValueType, nullable=False),
    Column("comparison_source", String, nullable=False),
    Column("comparison_value", FieldValueType, nullable=False),
    Column("severity", Enum(Severity, native_enum=False), nullable=False),
    Column("divergence", Float, nullable=False),
    Column("resolved", Boolean, nullable=False, default=False),
    Column("detected_at", UTCDateTime, nullable=False),
    Column("resolved_at", UTCDateTime, nullable=True),
    UniqueConstraint(
        "entity_key",
        "field",
        "comparison_source",
        "primary_value",
        "comparison_value",
        name="uq_resolution_conflict_identity",
    ),
    Index("ix_resolution_conflict_entity_key", "entity_key"),
)

response_cache_table = Table(
    "response_cache",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("source_id", String, nullable=False),
    Column("entity_key", String, nullable=False),
    Column("payload", JSON, nullable=False),
    Column("fetched_at", UTCDateTime, nullable=False),
    Column("expires_at", UTCDateTime, nullable=False),
    UniqueConstraint("source_id", "entity_key", name="uq_response_cache_source_entity"),
    Index("ix_response_cache_expires_at", "expires_at"),
)

verification_history_table = Table(
    "verification_history",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("entity_key", String, nullable=False),
    Column("verified_at", UTCDateTime, nullable=False),
    Column("sources_checked", JSON, nullable=False),
    Column("alignment_score", Float, nullable=True),
    Column("confidence_before", Float, nullable=True),
    Column("confidence_after", Float, nullable=False),
    Column("conflicts_found", Integer, nullable=False),
    Column("needs_review", Boolean, nullable=False),
    Column("notes", String, nullable=True),
    Index("ix_verification_history_entity_key", "entity_key"),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables without running migrations."""

    log.info("Creating all tables")
    metadata.create_all(engine)

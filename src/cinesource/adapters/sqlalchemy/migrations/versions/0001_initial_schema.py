"""Initial schema: resolved records, conflicts, response cache, verification history.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from cinesource.adapters.sqlalchemy.mappings import FieldValueType, UTCDateTime

revision: str = "0001_initial_schema"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_ENTITY_TYPES = ("FILM", "PERSON")
_SEVERITIES = ("LOW", "MEDIUM", "HIGH")


def upgrade() -> None:
    op.create_table(
        "resolved_record",
        sa.Column("entity_key", sa.String(), nullable=False),
        sa.Column(
            "entity_type",
            sa.Enum(*_ENTITY_TYPES, name="entitytype", native_enum=False),
            nullable=False,
        ),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("identity", sa.JSON(), nullable=False),
        sa.Column("fields", sa.JSON(), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("confidence_breakdown", sa.JSON(), nullable=False),
        sa.Column("field_provenance", sa.JSON(), nullable=False),
        sa.Column("low_coverage", sa.Boolean(), nullable=False),
        sa.Column("sources", sa.String(), nullable=False),
        sa.Column("alignment_score", sa.Float(), nullable=True),
        sa.Column("needs_manual_review", sa.Boolean(), nullable=False),
        sa.Column("review_reason", sa.String(), nullable=True),
        sa.Column("last_verified_at", UTCDateTime(), nullable=True),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("entity_key", name="pk_resolved_record"),
    )

    op.create_table(
        "resolution_conflict",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entity_key", sa.String(), nullable=False),
        sa.Column("field", sa.String(), nullable=False),
        sa.Column("primary_source", sa.String(), nullable=False),
        sa.Column("primary_value", FieldValueType(), nullable=False),
        sa.Column("comparison_source", sa.String(), nullable=False),
        sa.Column("comparison_value", FieldValueType(), nullable=False),
        sa.Column(
            "severity",
            sa.Enum(*_SEVERITIES, name="severity", native_enum=False),
            nullable=False,
        ),
        sa.Column("divergence", sa.Float(), nullable=False),
        sa.Column("resolved", sa.Boolean(), nullable=False),
        sa.Column("detected_at", UTCDateTime(), nullable=False),
        sa.Column("resolved_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_resolution_conflict"),
        sa.UniqueConstraint(
            "entity_key",
            "field",
            "comparison_source",
            "primary_value",
            "comparison_value",
            name="uq_resolution_conflict_identity",
        ),
    )
    op.create_index(
        "ix_resolution_conflict_entity_key", "resolution_conflict", ["entity_key"]
    )

    op.create_table(
        "response_cache",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("source_id", sa.String(), nullable=False),
        sa.Column("entity_key", sa.String(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("fetched_at", UTCDateTime(), nullable=False),
        sa.Column("expires_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_response_cache"),
        sa.UniqueConstraint("source_id", "entity_key", name="uq_response_cache_source_entity"),
    )
    op.create_index("ix_response_cache_expires_at", "response_cache", ["expires_at"])

    op.create_table(
        "verification_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entity_key", sa.String(), nullable=False),
        sa.Column("verified_at", UTCDateTime(), nullable=False),
        sa.Column("sources_checked", sa.JSON(), nullable=False),
        sa.Column("alignment_score", sa.Float(), nullable=True),
        sa.Column("confidence_before", sa.Float(), nullable=True),
        sa.Column("confidence_after", sa.Float(), nullable=False),
        sa.Column("conflicts_found", sa.Integer(), nullable=False),
        sa.Column("needs_review", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_verification_history"),
    )
    op.create_index(
        "ix_verification_history_entity_key", "verification_history", ["entity_key"]
    )


def downgrade() -> None:
    op.drop_index("ix_verification_history_entity_key", table_name="verification_history")
    op.drop_table("verification_history")
    op.drop_index("ix_response_cache_expires_at", table_name="response_cache")
    op.drop_table("response_cache")
    op.drop_index("ix_resolution_conflict_entity_key", table_name="resolution_conflict")
    op.drop_table("resolution_conflict")
    op.drop_table("resolved_record")

"""Store the trust badge beside each resolved record.

Revision ID: 0002_record_trust_badge
Revises: 0001_initial_schema
Create Date: 2026-10-19 12:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0002_record_trust_badge"
down_revision: str | Sequence[str] | None = "0001_initial_schema"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    with op.batch_alter_table("resolved_record") as batch:
        batch.add_column(
            sa.Column("trust_badge", sa.String(), nullable=False, server_default="unverified")
        )


def downgrade() -> None:
    with op.batch_alter_table("resolved_record") as batch:
        batch.drop_column("trust_badge")

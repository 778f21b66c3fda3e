"""SQLAlchemy adapter package for cinesource."""

from __future__ import annotations

from .mappings import (
    conflict_table,
    create_all_tables,
    metadata,
    resolved_record_table,
    response_cache_table,
    verification_history_table,
)
from .repositories import SqlAlchemyCacheStore, SqlAlchemyResolutionRepository

__all__ = [
    "SqlAlchemyCacheStore",
    "SqlAlchemyResolutionRepository",
    "conflict_table",
    "create_all_tables",
    "metadata",
    "resolved_record_table",
    "response_cache_table",
    "verification_history_table",
]

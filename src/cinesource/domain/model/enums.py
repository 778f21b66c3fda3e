"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    FILM = "film"
    PERSON = "person"


class ValueKind(StrEnum):
    """How a field's values are compared and validated."""

    TEXT = "text"
    URL = "url"
    YEAR = "year"
    INTEGER = "integer"
    DECIMAL = "decimal"


class SourcePool(StrEnum):
    """Whether a source may set resolved fields or only validate them."""

    PRIMARY = "primary"
    COMPARISON = "comparison"


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2}


class ResolutionState(StrEnum):
    PENDING = "pending"
    PARTIALLY_RESOLVED = "partially_resolved"
    FULLY_RESOLVED = "fully_resolved"
    EXHAUSTED = "exhausted"

    @property
    def is_terminal(self) -> bool:
        return self in {ResolutionState.FULLY_RESOLVED, ResolutionState.EXHAUSTED}


class TrustBadge(StrEnum):
    """Reader-facing label for a record's overall confidence."""

    VERIFIED = "verified"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNVERIFIED = "unverified"

"""Public domain model surface."""

from __future__ import annotations

from cinesource.domain.model.cache import CacheEntry
from cinesource.domain.model.candidate import Candidate, ResolvedField
from cinesource.domain.model.conflict import ConflictRecord
from cinesource.domain.model.entity import EntityKey, normalize_label
from cinesource.domain.model.enums import (
    EntityType,
    ResolutionState,
    Severity,
    SourcePool,
    TrustBadge,
    ValueKind,
)
from cinesource.domain.model.fields import (
    FIELD_KINDS,
    FIELD_SCHEMA,
    FieldName,
    FieldValue,
    coerce_value,
    validate_requested_fields,
)
from cinesource.domain.model.provenance import ProvenanceEntry
from cinesource.domain.model.record import SOURCE_SEPARATOR, FieldBreakdown, ResolvedRecord
from cinesource.domain.model.verification import VerificationEntry

__all__ = [  # noqa: RUF022
    # identity
    "EntityKey",
    "EntityType",
    "normalize_label",
    # fields
    "FIELD_KINDS",
    "FIELD_SCHEMA",
    "FieldName",
    "FieldValue",
    "ValueKind",
    "coerce_value",
    "validate_requested_fields",
    # values
    "Candidate",
    "ResolvedField",
    "ResolvedRecord",
    "SOURCE_SEPARATOR",
    "FieldBreakdown",
    "ProvenanceEntry",
    # review
    "ConflictRecord",
    "Severity",
    "TrustBadge",
    "VerificationEntry",
    # runtime
    "CacheEntry",
    "ResolutionState",
    "SourcePool",
]

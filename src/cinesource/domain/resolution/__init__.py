"""Multi-source field resolution.

A run walks the primary sources in priority order, merges candidates under the
"strictly higher confidence wins" rule, scores the result, then checks the
settled values against comparison-only sources to decide whether a human should
review the record.
"""

from __future__ import annotations

from .cache import DEFAULT_TTL, InMemoryCacheStore, ResponseCache
from .confidence import CombinedConfidence, TrustBadge, combine, trust_badge
from .conflicts import ConflictDetector, ConflictReport, ConflictThresholds, assess
from .contracts import (
    AttemptOutcome,
    CancelToken,
    ResolutionOptions,
    ResolutionRequest,
    ResolutionResult,
    SourceAttempt,
)
from .engine import ResolutionEngine
from .fetching import Consultation, SourceConsultant
from .provenance import ProvenanceStore
from .ratelimit import SourceRateLimiter
from .registry import (
    ConfidenceTier,
    RegisteredSource,
    SourceFetch,
    SourceRegistration,
    SourceRegistry,
)
from .review import NO_SOURCES_REASON, ReviewDecision, ReviewPolicy
from .similarity import normalize_text, text_similarity
from .waterfall import WaterfallOutcome, WaterfallResolver, WorkingRecord, accepts

__all__ = [
    "DEFAULT_TTL",
    "NO_SOURCES_REASON",
    "AttemptOutcome",
    "CancelToken",
    "CombinedConfidence",
    "ConfidenceTier",
    "ConflictDetector",
    "ConflictReport",
    "ConflictThresholds",
    "Consultation",
    "InMemoryCacheStore",
    "ProvenanceStore",
    "RegisteredSource",
    "ResolutionEngine",
    "ResolutionOptions",
    "ResolutionRequest",
    "ResolutionResult",
    "ResponseCache",
    "ReviewDecision",
    "ReviewPolicy",
    "SourceAttempt",
    "SourceConsultant",
    "SourceFetch",
    "SourceRateLimiter",
    "SourceRegistration",
    "SourceRegistry",
    "TrustBadge",
    "WaterfallOutcome",
    "WaterfallResolver",
    "WorkingRecord",
    "accepts",
    "assess",
    "combine",
    "normalize_text",
    "text_similarity",
    "trust_badge",
]

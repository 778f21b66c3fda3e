"""Ports for fetching field observations from external metadata providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from cinesource.domain.model import EntityKey, FieldName


class SourceError(Exception):
    """Base class for failures raised by source adapters."""

    def __init__(self, source_id: str, message: str) -> None:
        super().__init__(f"{source_id}: {message}")
        self.source_id = source_id


class SourceUnavailableError(SourceError):
    """Network failure, timeout or server error. The source is skipped."""


class SourceRateLimitedError(SourceError):
    """The provider asked us to slow down."""

    def __init__(self, source_id: str, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(source_id, message)
        self.retry_after = retry_after


class SourceAuthError(SourceError):
    """Credentials were rejected. The source is disabled for the rest of the run."""


class SourceParseError(SourceError):
    """Payload could not be interpreted.

    ``field`` is set for field-level failures; ``None`` means the whole payload
    is unusable.
    """

    def __init__(self, source_id: str, message: str, *, field: FieldName | None = None) -> None:
        super().__init__(source_id, message)
        self.field = field


@dataclass(frozen=True, slots=True)
class Observation:
    """A raw value a provider reported for one field.

    ``quality`` scales the source's base confidence: 1.0 for exact id lookups,
    lower for fuzzy search matches.
    """

    field: FieldName
    value: object
    quality: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError(f"quality must be within [0, 1], got {self.quality}")


@dataclass(frozen=True, slots=True)
class SourcePayload:
    observations: tuple[Observation, ...] = ()
    parse_errors: tuple[SourceParseError, ...] = ()
    fetched_at: datetime | None = None


@runtime_checkable
class SourceAdapter(Protocol):
    """Provider-specific fetcher wrapped by the source registry."""

    @property
    def name(self) -> str: ...

    @property
    def fields(self) -> frozenset[FieldName]: ...

    def supports(self, entity_key: EntityKey) -> bool: ...

    async def fetch(self, entity_key: EntityKey) -> SourcePayload: ...


__all__ = [
    "Observation",
    "SourceAdapter",
    "SourceAuthError",
    "SourceError",
    "SourceParseError",
    "SourcePayload",
    "SourceRateLimitedError",
    "SourceUnavailableError",
]

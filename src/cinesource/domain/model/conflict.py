from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from cinesource.domain.model.entity import EntityKey
    from cinesource.domain.model.enums import Severity
    from cinesource.domain.model.fields import FieldName, FieldValue


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictRecord:
    """A comparison source disagreeing with an accepted field value.

    Conflicts are informational; ``resolved`` is only ever set by a reviewer.
    """

    entity_key: EntityKey
    field: FieldName
    primary_source_id: str
    primary_value: FieldValue
    comparison_source_id: str
    comparison_value: FieldValue
    severity: Severity
    divergence: float
    detected_at: datetime
    resolved: bool = False

    @property
    def identity(self) -> tuple[str, str, str]:
        return (self.entity_key.cache_key, self.field.value, self.comparison_source_id)

    def describe(self) -> str:
        return (
            f"{self.severity}-severity conflict on {self.field} "
            f"({self.primary_source_id}={self.primary_value!r} vs "
            f"{self.comparison_source_id}={self.comparison_value!r})"
        )

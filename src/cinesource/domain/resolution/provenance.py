"""Per-field record of where accepted values came from."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cinesource.domain.model import EntityKey, FieldName, ProvenanceEntry


class ProvenanceStore:
    """Keyed by (entity, field); written only when a merge accepts a candidate.

    The engine builds one store per resolution task.

    ``history`` keeps every accepted entry in order, ``get`` only the current one
    per field.
    """

    def __init__(self) -> None:
        self._current: dict[str, dict[FieldName, ProvenanceEntry]] = {}
        self._history: dict[str, list[ProvenanceEntry]] = {}

    def seed(self, entity_key: EntityKey, entries: Iterable[ProvenanceEntry]) -> None:
        """Load provenance of a previously persisted record without logging it as new."""

        self._current[entity_key.cache_key] = {entry.field: entry for entry in entries}

    def record(self, entity_key: EntityKey, entry: ProvenanceEntry) -> None:
        self._current.setdefault(entity_key.cache_key, {})[entry.field] = entry
        self._history.setdefault(entity_key.cache_key, []).append(entry)

    def get(self, entity_key: EntityKey) -> dict[FieldName, ProvenanceEntry]:
        return dict(self._current.get(entity_key.cache_key, {}))

    def history(self, entity_key: EntityKey) -> tuple[ProvenanceEntry, ...]:
        return tuple(self._history.get(entity_key.cache_key, ()))

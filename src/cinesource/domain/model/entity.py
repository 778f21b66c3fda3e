"""Entity keys identify the film or person a resolution run is about."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from cinesource.domain.model.enums import EntityType

_WS_RE = re.compile(r"\s+")


def normalize_label(value: str) -> str:
    return _WS_RE.sub(" ", value.strip().casefold())


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityKey:
    """Stable identity of a film or person.

    ``title`` holds the film title or the person's name. External ids, when
    present, take precedence over the title when deriving ``cache_key``.
    """

    entity_type: EntityType
    title: str
    year: int | None = None
    tmdb_id: int | None = None
    imdb_id: str | None = None
    wikipedia_title: str | None = None

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("EntityKey.title must not be blank")
        if self.imdb_id is not None and not self.imdb_id.strip():
            raise ValueError("EntityKey.imdb_id must not be blank when given")

    @classmethod
    def film(cls, title: str, year: int | None = None, **ids: Any) -> EntityKey:
        return cls(entity_type=EntityType.FILM, title=title, year=year, **ids)

    @classmethod
    def person(cls, name: str, birth_year: int | None = None, **ids: Any) -> EntityKey:
        return cls(entity_type=EntityType.PERSON, title=name, year=birth_year, **ids)

    @property
    def cache_key(self) -> str:
        prefix = self.entity_type.value
        if self.tmdb_id is not None:
            return f"{prefix}:tmdb:{self.tmdb_id}"
        if self.imdb_id is not None:
            return f"{prefix}:imdb:{self.imdb_id.strip()}"
        year = "" if self.year is None else str(self.year)
        return f"{prefix}:title:{normalize_label(self.title)}:{year}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_type": self.entity_type.value,
            "title": self.title,
            "year": self.year,
            "tmdb_id": self.tmdb_id,
            "imdb_id": self.imdb_id,
            "wikipedia_title": self.wikipedia_title,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EntityKey:
        return cls(
            entity_type=EntityType(data["entity_type"]),
            title=data["title"],
            year=data.get("year"),
            tmdb_id=data.get("tmdb_id"),
            imdb_id=data.get("imdb_id"),
            wikipedia_title=data.get("wikipedia_title"),
        )

    def __str__(self) -> str:
        return self.cache_key

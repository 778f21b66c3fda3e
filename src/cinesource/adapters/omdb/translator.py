"""Translate OMDb payloads into field observations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cinesource.domain.model import FieldName
from cinesource.domain.ports.sources import Observation

from .schema import MISSING_VALUE

if TYPE_CHECKING:
    from .schema import OmdbTitle


def translate_title(title: OmdbTitle, *, quality: float = 1.0) -> tuple[Observation, ...]:
    values: dict[FieldName, str | None] = {
        FieldName.TITLE: title.title,
        FieldName.RELEASE_YEAR: title.year,
        FieldName.DIRECTOR: title.director,
        FieldName.POSTER_URL: title.poster,
        FieldName.SYNOPSIS: title.plot,
        FieldName.RUNTIME_MINUTES: title.runtime,
        FieldName.IMDB_RATING: title.imdb_rating,
    }
    return tuple(
        Observation(field=name, value=value, quality=quality)
        for name, value in values.items()
        if value and value.strip() != MISSING_VALUE
    )

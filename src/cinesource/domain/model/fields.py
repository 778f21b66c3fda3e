"""Field names and the per-entity-type field schema."""

from __future__ import annotations

import re
from enum import StrEnum
from typing import TYPE_CHECKING, Final
from urllib.parse import urlsplit

from cinesource.domain.model.enums import EntityType, ValueKind

if TYPE_CHECKING:
    from collections.abc import Iterable

type FieldValue = str | int | float

_YEAR_RE = re.compile(r"(\d{4})")
_INT_RE = re.compile(r"-?\d+")
_MIN_YEAR: Final[int] = 1870
_MAX_YEAR: Final[int] = 2100


class FieldName(StrEnum):
    # films
    TITLE = "title"
    RELEASE_YEAR = "release_year"
    DIRECTOR = "director"
    POSTER_URL = "poster_url"
    TAGLINE = "tagline"
    SYNOPSIS = "synopsis"
    RUNTIME_MINUTES = "runtime_minutes"
    IMDB_RATING = "imdb_rating"
    # people
    NAME = "name"
    BIRTH_YEAR = "birth_year"
    PROFILE_IMAGE_URL = "profile_image_url"
    BIOGRAPHY = "biography"
    KNOWN_FOR = "known_for"

    @property
    def kind(self) -> ValueKind:
        return FIELD_KINDS[self]


FIELD_KINDS: Final[dict[FieldName, ValueKind]] = {
    FieldName.TITLE: ValueKind.TEXT,
    FieldName.RELEASE_YEAR: ValueKind.YEAR,
    FieldName.DIRECTOR: ValueKind.TEXT,
    FieldName.POSTER_URL: ValueKind.URL,
    FieldName.TAGLINE: ValueKind.TEXT,
    FieldName.SYNOPSIS: ValueKind.TEXT,
    FieldName.RUNTIME_MINUTES: ValueKind.INTEGER,
    FieldName.IMDB_RATING: ValueKind.DECIMAL,
    FieldName.NAME: ValueKind.TEXT,
    FieldName.BIRTH_YEAR: ValueKind.YEAR,
    FieldName.PROFILE_IMAGE_URL: ValueKind.URL,
    FieldName.BIOGRAPHY: ValueKind.TEXT,
    FieldName.KNOWN_FOR: ValueKind.TEXT,
}

FIELD_SCHEMA: Final[dict[EntityType, frozenset[FieldName]]] = {
    EntityType.FILM: frozenset(
        {
            FieldName.TITLE,
            FieldName.RELEASE_YEAR,
            FieldName.DIRECTOR,
            FieldName.POSTER_URL,
            FieldName.TAGLINE,
            FieldName.SYNOPSIS,
            FieldName.RUNTIME_MINUTES,
            FieldName.IMDB_RATING,
        }
    ),
    EntityType.PERSON: frozenset(
        {
            FieldName.NAME,
            FieldName.BIRTH_YEAR,
            FieldName.PROFILE_IMAGE_URL,
            FieldName.BIOGRAPHY,
            FieldName.KNOWN_FOR,
        }
    ),
}


def validate_requested_fields(
    entity_type: EntityType,
    fields: Iterable[FieldName | str],
) -> frozenset[FieldName]:
    """Return the requested fields as ``FieldName`` members, rejecting unknown ones."""

    allowed = FIELD_SCHEMA[entity_type]
    requested: set[FieldName] = set()
    for raw in fields:
        try:
            name = FieldName(raw)
        except ValueError as exc:
            raise ValueError(f"Unknown field: {raw!r}") from exc
        if name not in allowed:
            raise ValueError(f"Field {name} is not defined for {entity_type} entities")
        requested.add(name)
    if not requested:
        raise ValueError("At least one field must be requested")
    return frozenset(requested)


def coerce_value(field: FieldName, raw: object) -> FieldValue:
    """Validate ``raw`` against the field's value kind.

    Raises ``ValueError`` when the value is blank or cannot be interpreted.
    """

    match field.kind:
        case ValueKind.TEXT:
            return _coerce_text(raw)
        case ValueKind.URL:
            return _coerce_url(raw)
        case ValueKind.YEAR:
            return _coerce_year(raw)
        case ValueKind.INTEGER:
            return _coerce_integer(raw)
        case ValueKind.DECIMAL:
            return _coerce_decimal(raw)


def _coerce_text(raw: object) -> str:
    if not isinstance(raw, str):
        raise ValueError(f"Expected text, got {type(raw).__name__}")
    text = " ".join(raw.split())
    if not text:
        raise ValueError("Text value is blank")
    return text


def _coerce_url(raw: object) -> str:
    text = _coerce_text(raw)
    parts = urlsplit(text)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"Not an absolute http(s) URL: {text!r}")
    return text


def _coerce_year(raw: object) -> int:
    if isinstance(raw, bool):
        raise ValueError("Boolean is not a year")
    if isinstance(raw, int):
        year = raw
    elif isinstance(raw, str):
        match = _YEAR_RE.search(raw)
        if match is None:
            raise ValueError(f"No year in {raw!r}")
        year = int(match.group(1))
    else:
        raise ValueError(f"Expected a year, got {type(raw).__name__}")
    if not _MIN_YEAR <= year <= _MAX_YEAR:
        raise ValueError(f"Year {year} is out of range")
    return year


def _coerce_integer(raw: object) -> int:
    if isinstance(raw, bool):
        raise ValueError("Boolean is not an integer")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        match = _INT_RE.search(raw)
        if match is None:
            raise ValueError(f"No integer in {raw!r}")
        value = int(match.group(0))
    else:
        raise ValueError(f"Expected an integer, got {type(raw).__name__}")
    if value <= 0:
        raise ValueError(f"Expected a positive integer, got {value}")
    return value


def _coerce_decimal(raw: object) -> float:
    if isinstance(raw, bool):
        raise ValueError("Boolean is not a number")
    if isinstance(raw, int | float):
        return float(raw)
    if isinstance(raw, str):
        try:
            return float(raw.strip())
        except ValueError as exc:
            raise ValueError(f"Not a number: {raw!r}") from exc
    raise ValueError(f"Expected a number, got {type(raw).__name__}")

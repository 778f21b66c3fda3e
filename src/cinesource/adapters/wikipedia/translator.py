"""Translate Wikipedia page summaries into field observations."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from cinesource.domain.model import FieldName
from cinesource.domain.ports.sources import Observation

if TYPE_CHECKING:
    from .schema import WikipediaSummary

_QUALIFIER_RE = re.compile(r"\s*\([^)]*\)\s*$")
_FILM_YEAR_RE = re.compile(r"\b(\d{4})\b[^,]*\bfilm\b", re.IGNORECASE)
_BORN_RE = re.compile(r"\(\s*(?:born\s+)?(?:[^)]*?\s)?(\d{4})\s*(?:[–-]|\))", re.IGNORECASE)


def strip_qualifier(title: str) -> str:
    """``"Inception (2010 film)"`` -> ``"Inception"``."""

    return _QUALIFIER_RE.sub("", title)


def describes_film(summary: WikipediaSummary) -> bool:
    return bool(summary.description and "film" in summary.description.lower())


def translate_film(summary: WikipediaSummary, *, quality: float = 1.0) -> tuple[Observation, ...]:
    year_match = _FILM_YEAR_RE.search(summary.description or "")
    values: dict[FieldName, object] = {
        FieldName.TITLE: strip_qualifier(summary.title),
        FieldName.RELEASE_YEAR: None if year_match is None else int(year_match.group(1)),
        FieldName.SYNOPSIS: summary.extract,
        FieldName.POSTER_URL: summary.image_url,
    }
    return _observations(values, quality)


def translate_person(
    summary: WikipediaSummary, *, quality: float = 1.0
) -> tuple[Observation, ...]:
    description = summary.description or ""
    born_match = _BORN_RE.search(description)
    values: dict[FieldName, object] = {
        FieldName.NAME: strip_qualifier(summary.title),
        FieldName.BIRTH_YEAR: None if born_match is None else int(born_match.group(1)),
        FieldName.BIOGRAPHY: summary.extract,
        FieldName.PROFILE_IMAGE_URL: summary.image_url,
        FieldName.KNOWN_FOR: strip_qualifier(description) or None,
    }
    return _observations(values, quality)


def _observations(values: dict[FieldName, object], quality: float) -> tuple[Observation, ...]:
    return tuple(
        Observation(field=name, value=value, quality=quality)
        for name, value in values.items()
        if value is not None and value != ""
    )

"""Translate TMDB payloads into field observations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cinesource.domain.model import FieldName
from cinesource.domain.ports.sources import Observation

if TYPE_CHECKING:
    from .schema import TmdbMovieDetails, TmdbPersonDetails

DIRECTOR_JOB = "Director"


def translate_movie(
    movie: TmdbMovieDetails,
    *,
    image_base_url: str,
    quality: float = 1.0,
) -> tuple[Observation, ...]:
    values: dict[FieldName, object] = {
        FieldName.TITLE: movie.title,
        FieldName.RELEASE_YEAR: movie.release_date,
        FieldName.DIRECTOR: _director(movie),
        FieldName.POSTER_URL: _image_url(image_base_url, movie.poster_path),
        FieldName.TAGLINE: movie.tagline,
        FieldName.SYNOPSIS: movie.overview,
        # TMDB reports 0 for unknown runtimes
        FieldName.RUNTIME_MINUTES: movie.runtime or None,
    }
    return _observations(values, quality)


def translate_person(
    person: TmdbPersonDetails,
    *,
    image_base_url: str,
    quality: float = 1.0,
) -> tuple[Observation, ...]:
    values: dict[FieldName, object] = {
        FieldName.NAME: person.name,
        FieldName.BIRTH_YEAR: person.birthday,
        FieldName.PROFILE_IMAGE_URL: _image_url(image_base_url, person.profile_path),
        FieldName.BIOGRAPHY: person.biography,
        FieldName.KNOWN_FOR: person.known_for_department,
    }
    return _observations(values, quality)


def _director(movie: TmdbMovieDetails) -> str | None:
    if movie.credits is None:
        return None
    for member in movie.credits.crew:
        if member.job == DIRECTOR_JOB:
            return member.name
    return None


def _image_url(base_url: str, path: str | None) -> str | None:
    if not path:
        return None
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _observations(values: dict[FieldName, object], quality: float) -> tuple[Observation, ...]:
    return tuple(
        Observation(field=name, value=value, quality=quality)
        for name, value in values.items()
        if value is not None and value != ""
    )

from __future__ import annotations

import pytest

from cinesource.domain.model import (
    EntityType,
    FieldName,
    ValueKind,
    coerce_value,
    validate_requested_fields,
)


def test_validate_requested_fields_accepts_names_and_members() -> None:
    result = validate_requested_fields(EntityType.FILM, ["director", FieldName.POSTER_URL])

    assert result == frozenset({FieldName.DIRECTOR, FieldName.POSTER_URL})


def test_validate_requested_fields_rejects_unknown_name() -> None:
    with pytest.raises(ValueError, match="Unknown field"):
        validate_requested_fields(EntityType.FILM, ["budget"])


def test_validate_requested_fields_rejects_field_of_other_entity_type() -> None:
    with pytest.raises(ValueError, match="not defined for person"):
        validate_requested_fields(EntityType.PERSON, [FieldName.DIRECTOR])


def test_validate_requested_fields_rejects_empty_request() -> None:
    with pytest.raises(ValueError, match="At least one field"):
        validate_requested_fields(EntityType.FILM, [])


def test_field_kinds() -> None:
    assert FieldName.RELEASE_YEAR.kind is ValueKind.YEAR
    assert FieldName.POSTER_URL.kind is ValueKind.URL
    assert FieldName.IMDB_RATING.kind is ValueKind.DECIMAL
    assert FieldName.BIOGRAPHY.kind is ValueKind.TEXT


def test_coerce_text_collapses_whitespace() -> None:
    assert coerce_value(FieldName.DIRECTOR, "  Michael \n Mann ") == "Michael Mann"


@pytest.mark.parametrize("raw", ["", "   ", None, 12])
def test_coerce_text_rejects_blank_or_non_text(raw: object) -> None:
    with pytest.raises(ValueError):
        coerce_value(FieldName.TAGLINE, raw)


def test_coerce_url_requires_absolute_http_url() -> None:
    url = "https://image.tmdb.org/t/p/w500/heat.jpg"

    assert coerce_value(FieldName.POSTER_URL, url) == url
    with pytest.raises(ValueError):
        coerce_value(FieldName.POSTER_URL, "/t/p/w500/heat.jpg")
    with pytest.raises(ValueError):
        coerce_value(FieldName.POSTER_URL, "ftp://example.org/heat.jpg")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(1995, 1995), ("1995-12-15", 1995), ("15 Dec 1995", 1995), ("1995–1996", 1995)],
)
def test_coerce_year_extracts_first_year(raw: object, expected: int) -> None:
    assert coerce_value(FieldName.RELEASE_YEAR, raw) == expected


@pytest.mark.parametrize("raw", ["unknown", 1200, True, 1995.0])
def test_coerce_year_rejects_invalid_values(raw: object) -> None:
    with pytest.raises(ValueError):
        coerce_value(FieldName.RELEASE_YEAR, raw)


def test_coerce_integer_parses_runtime_strings() -> None:
    assert coerce_value(FieldName.RUNTIME_MINUTES, "170 min") == 170
    assert coerce_value(FieldName.RUNTIME_MINUTES, 170) == 170
    with pytest.raises(ValueError):
        coerce_value(FieldName.RUNTIME_MINUTES, 0)


def test_coerce_decimal() -> None:
    assert coerce_value(FieldName.IMDB_RATING, "8.3") == 8.3
    assert coerce_value(FieldName.IMDB_RATING, 8) == 8.0
    with pytest.raises(ValueError):
        coerce_value(FieldName.IMDB_RATING, "N/A")

from __future__ import annotations

from cinesource.adapters.tmdb.schema import TmdbMovieDetails, TmdbPersonDetails
from cinesource.adapters.tmdb.translator import translate_movie, translate_person
from cinesource.domain.model import FieldName

IMAGES = "https://image.tmdb.org/t/p/w500/"


def test_translate_movie_maps_fields_and_director() -> None:
    movie = TmdbMovieDetails.model_validate(
        {
            "id": 949,
            "title": "Heat",
            "release_date": "1995-12-15",
            "tagline": "A Los Angeles crime saga",
            "overview": "Obsessive master thief Neil McCauley...",
            "runtime": 170,
            "poster_path": "/heat.jpg",
            "credits": {
                "crew": [
                    {"id": 1, "name": "Art Linson", "job": "Producer"},
                    {"id": 2, "name": "Michael Mann", "job": "Director"},
                ]
            },
        }
    )

    observations = {obs.field: obs for obs in translate_movie(movie, image_base_url=IMAGES)}

    assert observations[FieldName.TITLE].value == "Heat"
    assert observations[FieldName.RELEASE_YEAR].value == "1995-12-15"
    assert observations[FieldName.DIRECTOR].value == "Michael Mann"
    assert observations[FieldName.POSTER_URL].value == "https://image.tmdb.org/t/p/w500/heat.jpg"
    assert observations[FieldName.RUNTIME_MINUTES].value == 170
    assert {obs.quality for obs in observations.values()} == {1.0}


def test_translate_movie_skips_missing_values() -> None:
    movie = TmdbMovieDetails.model_validate(
        {"id": 1, "title": "Untitled", "release_date": "", "runtime": 0, "tagline": ""}
    )

    observations = translate_movie(movie, image_base_url=IMAGES, quality=0.9)

    assert [obs.field for obs in observations] == [FieldName.TITLE]
    assert observations[0].quality == 0.9


def test_translate_person() -> None:
    person = TmdbPersonDetails.model_validate(
        {
            "id": 1158,
            "name": "Al Pacino",
            "birthday": "1940-04-25",
            "biography": "Alfredo James Pacino is an American actor.",
            "profile_path": "pacino.jpg",
            "known_for_department": "Acting",
        }
    )

    observations = {obs.field: obs.value for obs in translate_person(person, image_base_url=IMAGES)}

    assert observations == {
        FieldName.NAME: "Al Pacino",
        FieldName.BIRTH_YEAR: "1940-04-25",
        FieldName.PROFILE_IMAGE_URL: "https://image.tmdb.org/t/p/w500/pacino.jpg",
        FieldName.BIOGRAPHY: "Alfredo James Pacino is an American actor.",
        FieldName.KNOWN_FOR: "Acting",
    }

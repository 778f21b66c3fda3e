from __future__ import annotations

import pytest

from cinesource.domain.model import EntityKey, EntityType


def test_cache_key_prefers_tmdb_id_then_imdb_id_then_title() -> None:
    assert EntityKey.film("Heat", 1995, tmdb_id=949, imdb_id="tt0113277").cache_key == (
        "film:tmdb:949"
    )
    assert EntityKey.film("Heat", 1995, imdb_id="tt0113277").cache_key == "film:imdb:tt0113277"
    assert EntityKey.film("  HEAT ", 1995).cache_key == "film:title:heat:1995"
    assert EntityKey.person("Michael  Mann").cache_key == "person:title:michael mann:"


def test_title_keys_ignore_case_and_spacing() -> None:
    assert EntityKey.film("The  Insider", 1999) == EntityKey.film("The  Insider", 1999)
    assert (
        EntityKey.film("the insider", 1999).cache_key
        == EntityKey.film("The  Insider ", 1999).cache_key
    )


def test_blank_title_is_rejected() -> None:
    with pytest.raises(ValueError, match="title"):
        EntityKey.film("   ")


def test_blank_imdb_id_is_rejected() -> None:
    with pytest.raises(ValueError, match="imdb_id"):
        EntityKey.film("Heat", imdb_id=" ")


def test_dict_round_trip_keeps_identity() -> None:
    key = EntityKey.person("Al Pacino", 1940, tmdb_id=1158, wikipedia_title="Al Pacino")

    restored = EntityKey.from_dict(key.to_dict())

    assert restored == key
    assert restored.entity_type is EntityType.PERSON
    assert str(restored) == "person:tmdb:1158"

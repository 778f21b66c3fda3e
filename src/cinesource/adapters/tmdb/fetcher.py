"""TMDB source adapter."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from cinesource.domain.model import FIELD_SCHEMA, EntityType, FieldName, normalize_label
from cinesource.domain.ports.sources import SourcePayload

from .client import SOURCE_NAME, TmdbClient
from .translator import translate_movie, translate_person

if TYPE_CHECKING:
    from cinesource.config.tmdb import TmdbConfig
    from cinesource.domain.model import EntityKey

    from .schema import (
        TmdbFindResult,
        TmdbMovieDetails,
        TmdbMovieSearch,
        TmdbPersonDetails,
        TmdbPersonSearch,
    )

log = getLogger(__name__)

EXACT_SEARCH_QUALITY = 0.95
FUZZY_SEARCH_QUALITY = 0.9

TMDB_FIELDS: frozenset[FieldName] = FIELD_SCHEMA[EntityType.PERSON] | (
    FIELD_SCHEMA[EntityType.FILM] - {FieldName.IMDB_RATING}
)


class TmdbLookupClient(Protocol):
    async def search_movie(self, *, title: str, year: int | None = None) -> TmdbMovieSearch: ...

    async def movie_details(self, tmdb_id: int) -> TmdbMovieDetails | None: ...

    async def search_person(self, *, name: str) -> TmdbPersonSearch: ...

    async def person_details(self, tmdb_id: int) -> TmdbPersonDetails | None: ...

    async def find_by_imdb_id(self, imdb_id: str) -> TmdbFindResult: ...


class TmdbSource:
    """Films and people from TMDB.

    Lookups by TMDB or IMDb id are trusted fully; title searches take the first
    hit and discount it, less so when the title matches exactly.
    """

    fields = TMDB_FIELDS

    def __init__(
        self,
        *,
        config: TmdbConfig,
        client: TmdbLookupClient | None = None,
        name: str = SOURCE_NAME,
    ) -> None:
        self.name = name
        self._image_base_url = config.image_base_url
        self._client = client or TmdbClient(config=config, source_name=name)

    def supports(self, entity_key: EntityKey) -> bool:
        return entity_key.entity_type in {EntityType.FILM, EntityType.PERSON}

    async def fetch(self, entity_key: EntityKey) -> SourcePayload:
        if entity_key.entity_type is EntityType.FILM:
            return await self._fetch_movie(entity_key)
        return await self._fetch_person(entity_key)

    async def _fetch_movie(self, entity_key: EntityKey) -> SourcePayload:
        tmdb_id, quality = await self._movie_id(entity_key)
        if tmdb_id is None:
            log.info("TMDB has no film matching %s", entity_key)
            return SourcePayload()
        movie = await self._client.movie_details(tmdb_id)
        if movie is None:
            return SourcePayload()
        return SourcePayload(
            observations=translate_movie(
                movie, image_base_url=self._image_base_url, quality=quality
            )
        )

    async def _fetch_person(self, entity_key: EntityKey) -> SourcePayload:
        tmdb_id, quality = await self._person_id(entity_key)
        if tmdb_id is None:
            log.info("TMDB has no person matching %s", entity_key)
            return SourcePayload()
        person = await self._client.person_details(tmdb_id)
        if person is None:
            return SourcePayload()
        return SourcePayload(
            observations=translate_person(
                person, image_base_url=self._image_base_url, quality=quality
            )
        )

    async def _movie_id(self, entity_key: EntityKey) -> tuple[int | None, float]:
        if entity_key.tmdb_id is not None:
            return entity_key.tmdb_id, 1.0
        if entity_key.imdb_id is not None:
            found = await self._client.find_by_imdb_id(entity_key.imdb_id)
            if found.movie_results:
                return found.movie_results[0].id, 1.0
        search = await self._client.search_movie(title=entity_key.title, year=entity_key.year)
        if not search.results:
            return None, 0.0
        hit = search.results[0]
        exact = normalize_label(hit.title) == normalize_label(entity_key.title)
        return hit.id, EXACT_SEARCH_QUALITY if exact else FUZZY_SEARCH_QUALITY

    async def _person_id(self, entity_key: EntityKey) -> tuple[int | None, float]:
        if entity_key.tmdb_id is not None:
            return entity_key.tmdb_id, 1.0
        if entity_key.imdb_id is not None:
            found = await self._client.find_by_imdb_id(entity_key.imdb_id)
            if found.person_results:
                return found.person_results[0].id, 1.0
        search = await self._client.search_person(name=entity_key.title)
        if not search.results:
            return None, 0.0
        hit = search.results[0]
        exact = normalize_label(hit.name) == normalize_label(entity_key.title)
        return hit.id, EXACT_SEARCH_QUALITY if exact else FUZZY_SEARCH_QUALITY

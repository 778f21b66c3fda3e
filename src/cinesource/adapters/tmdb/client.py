"""TMDB API client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from cinesource.adapters.http_resilience import (
    ResilientClient,
    raise_for_source_status,
    source_errors,
)

from .schema import (
    TmdbFindResult,
    TmdbMovieDetails,
    TmdbMovieSearch,
    TmdbPersonDetails,
    TmdbPersonSearch,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import BaseModel

    from cinesource.config.http_resilience import ResilienceConfig
    from cinesource.config.tmdb import TmdbConfig

log = getLogger(__name__)

SOURCE_NAME = "tmdb"


class TmdbClient:
    """Low-level async client for the TMDB v3 API.

    A missing resource (HTTP 404) is returned as ``None``; every other failure
    is raised as a source error.
    """

    def __init__(
        self,
        *,
        config: TmdbConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        source_name: str = SOURCE_NAME,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._source_name = source_name

    async def search_movie(self, *, title: str, year: int | None = None) -> TmdbMovieSearch:
        params = {"query": title, "include_adult": "false"}
        if year is not None:
            params["year"] = str(year)
        result = await self._get("search/movie", params, TmdbMovieSearch)
        return result or TmdbMovieSearch()

    async def movie_details(self, tmdb_id: int) -> TmdbMovieDetails | None:
        return await self._get(
            f"movie/{tmdb_id}",
            {"append_to_response": "credits"},
            TmdbMovieDetails,
        )

    async def search_person(self, *, name: str) -> TmdbPersonSearch:
        result = await self._get("search/person", {"query": name}, TmdbPersonSearch)
        return result or TmdbPersonSearch()

    async def person_details(self, tmdb_id: int) -> TmdbPersonDetails | None:
        return await self._get(f"person/{tmdb_id}", {}, TmdbPersonDetails)

    async def find_by_imdb_id(self, imdb_id: str) -> TmdbFindResult:
        result = await self._get(
            f"find/{imdb_id}",
            {"external_source": "imdb_id"},
            TmdbFindResult,
        )
        return result or TmdbFindResult()

    async def _get[TModel: BaseModel](
        self,
        path: str,
        params: dict[str, str],
        model: type[TModel],
    ) -> TModel | None:
        query = {"api_key": self._config.api_key, **params}
        with source_errors(self._source_name):
            async with self._client_factory(self._resilience) as client:
                response = await client.get(path, params=query)
            if response.status_code == 404:
                log.debug("TMDB %s not found", path)
                return None
            raise_for_source_status(self._source_name, response)
            return model.model_validate(response.json())

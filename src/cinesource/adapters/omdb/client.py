"""OMDb API client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from cinesource.adapters.http_resilience import (
    ResilientClient,
    raise_for_source_status,
    source_errors,
)

from .schema import OmdbTitle

if TYPE_CHECKING:
    from collections.abc import Callable

    from cinesource.config.http_resilience import ResilienceConfig
    from cinesource.config.omdb import OmdbConfig

log = getLogger(__name__)

SOURCE_NAME = "omdb"


class OmdbClient:
    """Low-level async client for the OMDb API."""

    def __init__(
        self,
        *,
        config: OmdbConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        source_name: str = SOURCE_NAME,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._source_name = source_name

    async def by_imdb_id(self, imdb_id: str) -> OmdbTitle | None:
        return await self._lookup({"i": imdb_id})

    async def by_title(self, title: str, *, year: int | None = None) -> OmdbTitle | None:
        params = {"t": title, "type": "movie"}
        if year is not None:
            params["y"] = str(year)
        return await self._lookup(params)

    async def _lookup(self, params: dict[str, str]) -> OmdbTitle | None:
        query = {"apikey": self._config.api_key, "plot": "short", **params}
        with source_errors(self._source_name):
            async with self._client_factory(self._resilience) as client:
                response = await client.get("", params=query)
            raise_for_source_status(self._source_name, response)
            title = OmdbTitle.model_validate(response.json())
        if not title.found:
            log.debug("OMDb lookup %s returned: %s", params, title.error)
            return None
        return title

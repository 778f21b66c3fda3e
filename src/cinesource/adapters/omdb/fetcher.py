"""OMDb source adapter."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from cinesource.domain.model import EntityType, FieldName
from cinesource.domain.ports.sources import SourcePayload

from .client import SOURCE_NAME, OmdbClient
from .translator import translate_title

if TYPE_CHECKING:
    from cinesource.config.omdb import OmdbConfig
    from cinesource.domain.model import EntityKey

    from .schema import OmdbTitle

log = getLogger(__name__)

TITLE_LOOKUP_QUALITY = 0.9

OMDB_FIELDS: frozenset[FieldName] = frozenset(
    {
        FieldName.TITLE,
        FieldName.RELEASE_YEAR,
        FieldName.DIRECTOR,
        FieldName.POSTER_URL,
        FieldName.SYNOPSIS,
        FieldName.RUNTIME_MINUTES,
        FieldName.IMDB_RATING,
    }
)


class OmdbLookupClient(Protocol):
    async def by_imdb_id(self, imdb_id: str) -> OmdbTitle | None: ...

    async def by_title(self, title: str, *, year: int | None = None) -> OmdbTitle | None: ...


class OmdbSource:
    """Films from OMDb, by IMDb id when known, else by title and year."""

    fields = OMDB_FIELDS

    def __init__(
        self,
        *,
        config: OmdbConfig,
        client: OmdbLookupClient | None = None,
        name: str = SOURCE_NAME,
    ) -> None:
        self.name = name
        self._client = client or OmdbClient(config=config, source_name=name)

    def supports(self, entity_key: EntityKey) -> bool:
        return entity_key.entity_type is EntityType.FILM

    async def fetch(self, entity_key: EntityKey) -> SourcePayload:
        if entity_key.imdb_id is not None:
            title = await self._client.by_imdb_id(entity_key.imdb_id)
            quality = 1.0
        else:
            title = await self._client.by_title(entity_key.title, year=entity_key.year)
            quality = TITLE_LOOKUP_QUALITY
        if title is None:
            log.info("OMDb has no film matching %s", entity_key)
            return SourcePayload()
        return SourcePayload(observations=translate_title(title, quality=quality))

"""Wikipedia source adapter."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from cinesource.domain.model import EntityType, FieldName
from cinesource.domain.ports.sources import SourcePayload

from .client import SOURCE_NAME, WikipediaClient
from .translator import describes_film, translate_film, translate_person

if TYPE_CHECKING:
    from cinesource.config.wikipedia import WikipediaConfig
    from cinesource.domain.model import EntityKey

    from .schema import WikipediaSummary

log = getLogger(__name__)

GUESSED_TITLE_QUALITY = 0.9

WIKIPEDIA_FIELDS: frozenset[FieldName] = frozenset(
    {
        FieldName.TITLE,
        FieldName.RELEASE_YEAR,
        FieldName.SYNOPSIS,
        FieldName.POSTER_URL,
        FieldName.NAME,
        FieldName.BIRTH_YEAR,
        FieldName.BIOGRAPHY,
        FieldName.PROFILE_IMAGE_URL,
        FieldName.KNOWN_FOR,
    }
)


class SummaryClient(Protocol):
    async def summary(self, title: str) -> WikipediaSummary | None: ...


def candidate_titles(entity_key: EntityKey) -> tuple[str, ...]:
    """Page titles to try, most specific first."""

    if entity_key.wikipedia_title:
        return (entity_key.wikipedia_title,)
    title = entity_key.title
    if entity_key.entity_type is not EntityType.FILM:
        return (title,)
    if entity_key.year is None:
        return (f"{title} (film)", title)
    return (f"{title} ({entity_key.year} film)", f"{title} (film)", title)


class WikipediaSource:
    """Page summaries from English Wikipedia.

    Without an explicit page title the adapter guesses the conventional
    ``"<title> (<year> film)"`` forms and discounts what it finds.
    """

    fields = WIKIPEDIA_FIELDS

    def __init__(
        self,
        *,
        config: WikipediaConfig,
        client: SummaryClient | None = None,
        name: str = SOURCE_NAME,
    ) -> None:
        self.name = name
        self._client = client or WikipediaClient(config=config, source_name=name)

    def supports(self, entity_key: EntityKey) -> bool:
        return entity_key.entity_type in {EntityType.FILM, EntityType.PERSON}

    async def fetch(self, entity_key: EntityKey) -> SourcePayload:
        explicit = entity_key.wikipedia_title is not None
        summary = await self._find_page(entity_key, explicit=explicit)
        if summary is None:
            log.info("Wikipedia has no article matching %s", entity_key)
            return SourcePayload()
        quality = 1.0 if explicit else GUESSED_TITLE_QUALITY
        if entity_key.entity_type is EntityType.FILM:
            return SourcePayload(observations=translate_film(summary, quality=quality))
        return SourcePayload(observations=translate_person(summary, quality=quality))

    async def _find_page(self, entity_key: EntityKey, *, explicit: bool) -> WikipediaSummary | None:
        for title in candidate_titles(entity_key):
            summary = await self._client.summary(title)
            if summary is None or not summary.is_article:
                continue
            if (
                not explicit
                and entity_key.entity_type is EntityType.FILM
                and not describes_film(summary)
            ):
                continue
            return summary
        return None

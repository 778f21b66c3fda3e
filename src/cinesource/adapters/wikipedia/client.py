"""Wikipedia REST API client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

from cinesource.adapters.http_resilience import (
    ResilientClient,
    raise_for_source_status,
    source_errors,
)

from .schema import WikipediaSummary

if TYPE_CHECKING:
    from collections.abc import Callable

    from cinesource.config.http_resilience import ResilienceConfig
    from cinesource.config.wikipedia import WikipediaConfig

log = getLogger(__name__)

SOURCE_NAME = "wikipedia"


def page_path(title: str) -> str:
    return "page/summary/" + quote(title.strip().replace(" ", "_"), safe="")


class WikipediaClient:
    def __init__(
        self,
        *,
        config: WikipediaConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        source_name: str = SOURCE_NAME,
    ) -> None:
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._source_name = source_name

    async def summary(self, title: str) -> WikipediaSummary | None:
        """Return the page summary, or ``None`` for missing pages."""

        path = page_path(title)
        with source_errors(self._source_name):
            async with self._client_factory(self._resilience) as client:
                response = await client.get(path, follow_redirects=True)
            if response.status_code == 404:
                log.debug("Wikipedia page %r not found", title)
                return None
            raise_for_source_status(self._source_name, response)
            return WikipediaSummary.model_validate(response.json())

"""Pydantic models for the Wikipedia REST page summary endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

STANDARD_PAGE = "standard"


class WikipediaBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class WikipediaImage(WikipediaBaseModel):
    source: str
    width: int | None = None
    height: int | None = None


class WikipediaSummary(WikipediaBaseModel):
    type: str
    title: str
    description: str | None = None
    extract: str | None = None
    thumbnail: WikipediaImage | None = None
    originalimage: WikipediaImage | None = None

    @property
    def is_article(self) -> bool:
        return self.type == STANDARD_PAGE

    @property
    def image_url(self) -> str | None:
        image = self.originalimage or self.thumbnail
        return None if image is None else image.source

"""Pydantic models for OMDb responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

MISSING_VALUE = "N/A"


class OmdbBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class OmdbTitle(OmdbBaseModel):
    response: str = Field(alias="Response")
    error: str | None = Field(default=None, alias="Error")
    title: str | None = Field(default=None, alias="Title")
    year: str | None = Field(default=None, alias="Year")
    director: str | None = Field(default=None, alias="Director")
    plot: str | None = Field(default=None, alias="Plot")
    poster: str | None = Field(default=None, alias="Poster")
    runtime: str | None = Field(default=None, alias="Runtime")
    imdb_rating: str | None = Field(default=None, alias="imdbRating")
    imdb_id: str | None = Field(default=None, alias="imdbID")
    type: str | None = Field(default=None, alias="Type")

    @property
    def found(self) -> bool:
        return self.response.lower() == "true"

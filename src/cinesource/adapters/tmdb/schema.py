"""Minimal Pydantic models for the TMDB v3 API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TmdbBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TmdbCrewMember(TmdbBaseModel):
    id: int
    name: str
    job: str | None = None
    department: str | None = None


class TmdbCredits(TmdbBaseModel):
    crew: list[TmdbCrewMember] = Field(default_factory=list["TmdbCrewMember"])


class TmdbMovieSummary(TmdbBaseModel):
    id: int
    title: str
    release_date: str | None = None
    popularity: float | None = None


class TmdbMovieDetails(TmdbMovieSummary):
    tagline: str | None = None
    overview: str | None = None
    runtime: int | None = None
    poster_path: str | None = None
    imdb_id: str | None = None
    credits: TmdbCredits | None = None


class TmdbPersonSummary(TmdbBaseModel):
    id: int
    name: str
    known_for_department: str | None = None
    popularity: float | None = None


class TmdbPersonDetails(TmdbPersonSummary):
    birthday: str | None = None
    biography: str | None = None
    profile_path: str | None = None
    imdb_id: str | None = None


class TmdbMovieSearch(TmdbBaseModel):
    page: int = 1
    results: list[TmdbMovieSummary] = Field(default_factory=list["TmdbMovieSummary"])


class TmdbPersonSearch(TmdbBaseModel):
    page: int = 1
    results: list[TmdbPersonSummary] = Field(default_factory=list["TmdbPersonSummary"])


class TmdbFindResult(TmdbBaseModel):
    movie_results: list[TmdbMovieSummary] = Field(default_factory=list["TmdbMovieSummary"])
    person_results: list[TmdbPersonSummary] = Field(default_factory=list["TmdbPersonSummary"])

"""Pydantic models describing listing requests and content documents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .content_types import ContentType
from .utils import slugify

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .db_models import ContentRecord


class PageQuery(BaseModel):
    """Optional query-string parameters accepted by the page endpoint."""

    model_config = ConfigDict(frozen=True)

    sort: str | None = None
    order: str | None = None
    genre: str | None = None
    keywords: str | None = None

    @classmethod
    def from_request(cls, params: Mapping[str, Any]) -> "PageQuery":
        return cls.model_validate(
            {name: params.get(name) for name in cls.model_fields}
        )

    @field_validator("*", mode="before")
    @classmethod
    def _only_strings(cls, value: object) -> object:
        # Repeated or structured parameters are treated as absent.
        if isinstance(value, str):
            return value
        return None


class Rating(BaseModel):
    """Audience rating counters attached to every content item."""

    percentage: int = 0
    watching: int = 0
    votes: int = 0
    loved: int = 100
    hated: int = 100


class ContentItem(BaseModel):
    """A single movie, show or anime document returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    type: ContentType
    title: str
    slug: str | None = None
    year: int | None = None
    synopsis: str | None = None
    runtime: int | None = None
    released: int | None = None
    latest_episode: int | None = None
    num_seasons: int | None = None
    genres: list[str] = Field(default_factory=list)
    rating: Rating = Field(default_factory=Rating)
    images: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record: "ContentRecord") -> "ContentItem":
        return cls(
            id=record.id,
            type=record.type,
            title=record.title,
            slug=record.slug or slugify(record.title),
            year=record.year,
            synopsis=record.synopsis,
            runtime=record.runtime,
            released=record.released,
            latest_episode=record.latest_episode,
            num_seasons=record.num_seasons,
            genres=[genre.genre for genre in record.genres],
            rating=Rating(
                percentage=record.rating_percentage,
                watching=record.rating_watching,
                votes=record.rating_votes,
                loved=record.rating_loved,
                hated=record.rating_hated,
            ),
            images=dict(record.images or {}),
        )

    def to_document(self) -> dict[str, Any]:
        """Return the JSON document served by the content endpoints."""

        return self.model_dump(mode="json", by_alias=True)

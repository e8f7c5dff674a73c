"""Content type definitions served by the listing endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping


ContentType = Literal["movie", "show", "anime"]


@dataclass(frozen=True)
class ContentTypeDefinition:
    """Describes one content collection and the filter that scopes it."""

    key: ContentType
    title: str
    base_query: Mapping[str, Any] = field(default_factory=dict)

    @property
    def resource(self) -> str:
        """Return the singular resource name used to build route paths."""

        return self.key


CONTENT_TYPES: tuple[ContentTypeDefinition, ...] = (
    ContentTypeDefinition(
        key="movie",
        title="Movies",
        base_query=MappingProxyType({"type": "movie"}),
    ),
    ContentTypeDefinition(
        key="show",
        title="Shows",
        base_query=MappingProxyType({"type": "show", "num_seasons": {"$gt": 0}}),
    ),
    ContentTypeDefinition(
        key="anime",
        title="Anime",
        base_query=MappingProxyType({"type": "anime", "num_seasons": {"$gt": 0}}),
    ),
)

CONTENT_TYPE_KEYS: tuple[str, ...] = tuple(
    definition.key for definition in CONTENT_TYPES
)

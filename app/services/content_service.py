"""Storage-backed retrieval of content documents."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from sqlalchemy import ColumnElement, Select, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import InstrumentedAttribute

from ..content_types import ContentTypeDefinition
from ..db_models import ContentGenre, ContentRecord
from ..models import ContentItem
from ..query import ASCENDING, FilterSpec, SortSpec
from ..utils import page_count

logger = logging.getLogger(__name__)


class ContentQueryError(ValueError):
    """Raised when a page request cannot be executed as given."""


class InvalidPageError(ContentQueryError):
    """Raised for page numbers that are not whole numbers of at least one."""


class UnsupportedFilterError(ContentQueryError):
    """Raised for filter or sort fields and operators the store cannot run."""


_FIELD_COLUMNS: dict[str, InstrumentedAttribute[Any]] = {
    "_id": ContentRecord.id,
    "type": ContentRecord.type,
    "title": ContentRecord.title,
    "slug": ContentRecord.slug,
    "year": ContentRecord.year,
    "runtime": ContentRecord.runtime,
    "released": ContentRecord.released,
    "latest_episode": ContentRecord.latest_episode,
    "num_seasons": ContentRecord.num_seasons,
    "rating.percentage": ContentRecord.rating_percentage,
    "rating.watching": ContentRecord.rating_watching,
    "rating.votes": ContentRecord.rating_votes,
    "rating.loved": ContentRecord.rating_loved,
    "rating.hated": ContentRecord.rating_hated,
}

_REGEX_FLAGS = frozenset("imsx")

# Largest OFFSET SQLite can bind as a 64-bit signed integer.
MAX_OFFSET = 2**63 - 1


def _regex_condition(
    column: InstrumentedAttribute[Any], pattern: object, options: object
) -> ColumnElement[bool]:
    if not isinstance(pattern, str):
        raise UnsupportedFilterError("$regex expects a string pattern")
    flags = str(options or "")
    unknown = set(flags) - _REGEX_FLAGS
    if unknown:
        raise UnsupportedFilterError(
            f"Unsupported $options: {''.join(sorted(unknown))}"
        )
    if flags:
        pattern = f"(?{''.join(sorted(set(flags)))}){pattern}"
    return column.regexp_match(pattern)


def _field_condition(field: str, value: Any) -> ColumnElement[bool]:
    if field == "genres":
        if isinstance(value, Mapping):
            raise UnsupportedFilterError("genres only supports exact matches")
        return ContentRecord.genres.any(ContentGenre.genre == value)

    column = _FIELD_COLUMNS.get(field)
    if column is None:
        raise UnsupportedFilterError(f"Unknown filter field: {field}")
    if not isinstance(value, Mapping):
        return column == value

    if "$regex" in value:
        extra = set(value) - {"$regex", "$options"}
        if extra:
            raise UnsupportedFilterError(
                f"Unsupported operators for {field}: {', '.join(sorted(extra))}"
            )
        return _regex_condition(column, value["$regex"], value.get("$options"))

    conditions: list[ColumnElement[bool]] = []
    for operator, operand in value.items():
        if operator == "$gt":
            conditions.append(column > operand)
        elif operator == "$gte":
            conditions.append(column >= operand)
        elif operator == "$lt":
            conditions.append(column < operand)
        elif operator == "$lte":
            conditions.append(column <= operand)
        elif operator == "$ne":
            conditions.append(column != operand)
        else:
            raise UnsupportedFilterError(f"Unsupported operator for {field}: {operator}")
    if not conditions:
        raise UnsupportedFilterError(f"Empty constraint for {field}")
    return and_(*conditions)


def build_conditions(query: Mapping[str, Any]) -> list[ColumnElement[bool]]:
    """Translate a filter mapping into SQLAlchemy WHERE clauses."""

    return [_field_condition(field, value) for field, value in query.items()]


def apply_sort(statement: Select[Any], sort: SortSpec) -> Select[Any]:
    """Order ``statement`` by the sort pairs followed by the primary key."""

    for field, direction in sort:
        column = _FIELD_COLUMNS.get(field)
        if column is None:
            raise UnsupportedFilterError(f"Unknown sort field: {field}")
        statement = statement.order_by(
            column.asc() if direction == ASCENDING else column.desc()
        )
    return statement.order_by(ContentRecord.id.asc())


def _validate_page(page: int | float, page_size: int) -> int:
    if isinstance(page, bool) or not isinstance(page, (int, float)):
        raise InvalidPageError("Page must be a number")
    if not math.isfinite(page) or not float(page).is_integer() or page < 1:
        raise InvalidPageError(f"Invalid page number: {page}")
    if (int(page) - 1) * page_size > MAX_OFFSET:
        raise InvalidPageError(f"Page number out of range: {int(page)}")
    return int(page)


class ContentService:
    """Runs filter and sort specifications against one content collection."""

    def __init__(
        self,
        definition: ContentTypeDefinition,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        page_size: int,
    ) -> None:
        self._definition = definition
        self._session_factory = session_factory
        self._page_size = page_size

    @property
    def resource(self) -> str:
        return self._definition.resource

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def query(self) -> FilterSpec:
        """Return the filter scoping this collection."""

        return dict(self._definition.base_query)

    async def get_page(
        self, sort: SortSpec, page: int | float, query: FilterSpec
    ) -> list[dict[str, Any]]:
        """Return one page of documents matching ``query`` ordered by ``sort``."""

        page_number = _validate_page(page, self._page_size)
        statement = select(ContentRecord).where(*build_conditions(query))
        statement = apply_sort(statement, sort)
        statement = statement.offset((page_number - 1) * self._page_size).limit(
            self._page_size
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)
            records = result.scalars().all()

        logger.debug(
            "Fetched %d %s items for page %d", len(records), self.resource, page_number
        )
        return [ContentItem.from_record(record).to_document() for record in records]

    async def count(self, query: FilterSpec | None = None) -> int:
        """Return how many documents match ``query`` (the base filter by default)."""

        conditions = build_conditions(self.query if query is None else query)
        statement = select(func.count()).select_from(ContentRecord).where(*conditions)
        async with self._session_factory() as session:
            result = await session.execute(statement)
            return int(result.scalar_one())

    async def get_contents(self) -> list[str]:
        """Return the relative paths of every page in the collection."""

        total = await self.count()
        pages = page_count(total, self._page_size)
        return [f"{self.resource}s/{number}" for number in range(1, pages + 1)]

    async def get_content(self, content_id: str) -> dict[str, Any] | None:
        """Return the document with ``content_id`` if it belongs to this collection."""

        query = {**self.query, "_id": content_id}
        statement = select(ContentRecord).where(*build_conditions(query))
        async with self._session_factory() as session:
            result = await session.execute(statement)
            record = result.scalars().first()
        if record is None:
            return None
        return ContentItem.from_record(record).to_document()

    async def get_random_content(self) -> dict[str, Any] | None:
        """Return one random document from the collection."""

        statement = (
            select(ContentRecord)
            .where(*build_conditions(self.query))
            .order_by(func.random())
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)
            record = result.scalars().first()
        if record is None:
            return None
        return ContentItem.from_record(record).to_document()

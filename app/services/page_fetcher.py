"""Page listing orchestration: parameters in, HTTP response out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from fastapi.responses import JSONResponse, Response

from ..models import PageQuery
from ..query import FilterSpec, SortSpec, build_filter, build_sort_spec, parse_order
from ..utils import parse_page_number

logger = logging.getLogger(__name__)


class PageSource(Protocol):
    """Retrieval collaborator able to execute a filter and sort spec."""

    @property
    def query(self) -> FilterSpec: ...

    async def get_page(
        self, sort: SortSpec, page: int | float, query: FilterSpec
    ) -> Sequence[Any]: ...


@dataclass(frozen=True, slots=True)
class NonEmptyPage:
    """Retrieval succeeded with at least one item."""

    items: Sequence[Any] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class EmptyPage:
    """Retrieval succeeded but the page holds no items."""


@dataclass(frozen=True, slots=True)
class Failure:
    """Retrieval raised; ``error`` is the original exception."""

    error: Exception


ResultOutcome = NonEmptyPage | EmptyPage | Failure


@dataclass(frozen=True, slots=True)
class PageRequest:
    """Fully resolved arguments for one retrieval call."""

    sort: SortSpec
    page: int | float
    query: FilterSpec


class PageFetcher:
    """Serve one page of a content collection."""

    def __init__(self, source: PageSource) -> None:
        self._source = source

    def resolve(self, page_param: str, params: PageQuery) -> PageRequest:
        """Turn raw request values into the sort, page and filter to execute."""

        order = parse_order(params.order)
        sort: SortSpec = (
            build_sort_spec(params.sort, order) if params.sort is not None else ()
        )
        query = build_filter(self._source.query, params.genre, params.keywords)
        return PageRequest(sort=sort, page=parse_page_number(page_param), query=query)

    async def retrieve(self, page_param: str, params: PageQuery) -> ResultOutcome:
        request = self.resolve(page_param, params)
        logger.debug(
            "Fetching page %s with sort=%s query=%s",
            request.page,
            request.sort,
            request.query,
        )
        try:
            items = await self._source.get_page(
                request.sort, request.page, request.query
            )
        except Exception as exc:
            return Failure(exc)
        if not items:
            return EmptyPage()
        return NonEmptyPage(items=list(items))

    @staticmethod
    def respond(outcome: ResultOutcome) -> Response:
        """Map an outcome to a response, re-raising failures for the error handlers."""

        if isinstance(outcome, Failure):
            raise outcome.error
        if isinstance(outcome, EmptyPage):
            return Response(status_code=204)
        return JSONResponse(list(outcome.items))

    async def fetch_page(self, page_param: str, params: PageQuery) -> Response:
        outcome = await self.retrieve(page_param, params)
        return self.respond(outcome)

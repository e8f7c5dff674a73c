"""Translate listing query-string parameters into filter and sort specs.

Every function in this module is pure and total: unexpected input falls back
to a documented default instead of raising, so building a query never fails.
Failures only come from the storage layer that executes the result.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

SortSpec = tuple[tuple[str, int], ...]
FilterSpec = dict[str, Any]

ASCENDING = 1
DESCENDING = -1

SCIENCE_FICTION = "science-fiction"
KEYWORD_OPTIONS = "im"

_SORT_FIELDS: dict[str, tuple[str, ...]] = {
    "name": ("title",),
    "rating": ("rating.votes", "rating.percentage"),
    "released": ("latest_episode", "released"),
    "updated": ("latest_episode", "released"),
    "trending": ("rating.watching",),
    "year": ("year",),
}
_DEFAULT_SORT_FIELDS: tuple[str, ...] = (
    "rating.votes",
    "rating.percentage",
    "rating.watching",
)

_ORDER_RE = re.compile(r"^\s*([+-]?\d+)")
_SCIENCE_FICTION_RE = re.compile(r"science[-\s]f[iu]ction", re.IGNORECASE)
_SCI_FI_RE = re.compile(r"sci[-\s]fi", re.IGNORECASE)
_NON_ALPHANUMERIC_RE = re.compile(r"[^a-zA-Z0-9]")
_PATTERN_SYNTAX_RE = re.compile(r"[-\[\]{}()*+?.,\\^$|#\s]")


def parse_order(raw: str | None) -> int:
    """Return ``1`` or ``-1`` for a raw ``order`` query parameter.

    Leading integer digits are honoured the way browsers parse them, so
    ``"1abc"`` counts as ascending. Anything unparseable, or zero, sorts
    descending.
    """

    if raw is None:
        return DESCENDING
    match = _ORDER_RE.match(str(raw))
    if not match:
        return DESCENDING
    value = int(match.group(1))
    return ASCENDING if value > 0 else DESCENDING


def build_sort_spec(sort_key: str, direction: int) -> SortSpec:
    """Return the ordered ``(field, direction)`` pairs for ``sort_key``.

    Unknown keys, including the empty string, fall back to sorting on votes,
    percentage and watching count.
    """

    fields = _SORT_FIELDS.get(sort_key.lower(), _DEFAULT_SORT_FIELDS)
    return tuple((field, direction) for field in fields)


def normalize_genre(raw: str | None) -> str | None:
    """Return the canonical genre filter value, or ``None`` for no filter."""

    if not raw or raw.lower() == "all":
        return None
    genre = raw.lower()
    if _SCIENCE_FICTION_RE.search(genre) or _SCI_FI_RE.search(genre):
        return SCIENCE_FICTION
    return genre


def _keyword_fragment(word: str) -> str:
    cleaned = _NON_ALPHANUMERIC_RE.sub("", word)
    cleaned = _PATTERN_SYNTAX_RE.sub(lambda match: "\\" + match.group(0), cleaned)
    return cleaned.lower()


def build_keyword_pattern(raw: str | None) -> re.Pattern[str] | None:
    """Return a pattern requiring every keyword as a whole word, in any order.

    Words are split on single spaces and reduced to ASCII letters and digits
    before they are embedded, so user input never reaches the pattern as
    syntax. A word that strips to nothing still contributes a lookahead.
    """

    if not raw:
        return None
    lookaheads = "".join(
        rf"(?=.*\b{_keyword_fragment(word)}\b)" for word in raw.split(" ")
    )
    return re.compile(f"^{lookaheads}.*", re.IGNORECASE | re.MULTILINE)


def build_filter(
    base: Mapping[str, Any],
    raw_genre: str | None,
    raw_keywords: str | None,
) -> FilterSpec:
    """Return a copy of ``base`` narrowed by the optional genre and keywords."""

    query: FilterSpec = dict(base)

    genre = normalize_genre(raw_genre)
    if genre is not None:
        query["genres"] = genre

    pattern = build_keyword_pattern(raw_keywords)
    if pattern is not None:
        query["title"] = {"$regex": pattern.pattern, "$options": KEYWORD_OPTIONS}

    return query


__all__ = [
    "ASCENDING",
    "DESCENDING",
    "FilterSpec",
    "KEYWORD_OPTIONS",
    "SCIENCE_FICTION",
    "SortSpec",
    "build_filter",
    "build_keyword_pattern",
    "build_sort_spec",
    "normalize_genre",
    "parse_order",
]

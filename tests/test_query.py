"""Tests for sort, genre, keyword and filter construction."""

from __future__ import annotations

import re

import pytest

from app.query import (
    KEYWORD_OPTIONS,
    build_filter,
    build_keyword_pattern,
    build_sort_spec,
    normalize_genre,
    parse_order,
)

FALLBACK_FIELDS = ("rating.votes", "rating.percentage", "rating.watching")


@pytest.mark.parametrize(
    ("sort_key", "expected"),
    [
        ("name", ("title",)),
        ("rating", ("rating.votes", "rating.percentage")),
        ("released", ("latest_episode", "released")),
        ("updated", ("latest_episode", "released")),
        ("trending", ("rating.watching",)),
        ("year", ("year",)),
    ],
)
def test_build_sort_spec_known_keys(sort_key: str, expected: tuple[str, ...]) -> None:
    assert build_sort_spec(sort_key, -1) == tuple((field, -1) for field in expected)


@pytest.mark.parametrize("sort_key", ["", "popularity", "42", "Ratings", " name"])
def test_build_sort_spec_unknown_keys_fall_back(sort_key: str) -> None:
    assert build_sort_spec(sort_key, 1) == tuple((field, 1) for field in FALLBACK_FIELDS)


def test_build_sort_spec_is_case_insensitive() -> None:
    assert build_sort_spec("NAME", 1) == build_sort_spec("name", 1)
    assert build_sort_spec("Trending", -1) == (("rating.watching", -1),)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, -1),
        ("", -1),
        ("abc", -1),
        ("0", -1),
        ("1", 1),
        ("-1", -1),
        ("5", 1),
        ("-7", -1),
        ("1abc", 1),
        (" +1", 1),
    ],
)
def test_parse_order(raw: str | None, expected: int) -> None:
    assert parse_order(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["Sci-Fi", "SCI FI", "sci-fi", "science-fuction", "Science Fiction", "science-fiction"],
)
def test_normalize_genre_folds_science_fiction(raw: str) -> None:
    assert normalize_genre(raw) == "science-fiction"


@pytest.mark.parametrize("raw", [None, "", "all", "ALL", "All"])
def test_normalize_genre_absent(raw: str | None) -> None:
    assert normalize_genre(raw) is None


def test_normalize_genre_lowercases_other_values() -> None:
    assert normalize_genre("Drama") == "drama"
    assert normalize_genre("Film-Noir") == "film-noir"


def test_keyword_pattern_absent_for_empty_input() -> None:
    assert build_keyword_pattern(None) is None
    assert build_keyword_pattern("") is None


def test_keyword_pattern_requires_every_word() -> None:
    pattern = build_keyword_pattern("the walking dead")

    assert pattern is not None
    assert pattern.match("The Walking Dead (2010)")
    assert pattern.match("Dead Walking The")
    assert not pattern.match("The Walking")


def test_keyword_pattern_matches_whole_words_only() -> None:
    pattern = build_keyword_pattern("dead")

    assert pattern is not None
    assert pattern.match("Fear the Walking Dead")
    assert not pattern.match("Deadwood")


@pytest.mark.parametrize(
    "title",
    ["Walking Dead", "Dead Walking", "The Walking Dead", "Walking", "Dead", "Walking Tall"],
)
def test_keyword_pattern_is_order_independent(title: str) -> None:
    forward = build_keyword_pattern("walking dead")
    backward = build_keyword_pattern("dead walking")

    assert forward is not None and backward is not None
    assert bool(forward.match(title)) == bool(backward.match(title))


def test_keyword_pattern_neutralises_pattern_syntax() -> None:
    pattern = build_keyword_pattern("c.*+? (a|b)")

    assert pattern is not None
    assert pattern.pattern == r"^(?=.*\bc\b)(?=.*\bab\b).*"
    assert pattern.match("Plan C and AB")
    assert not pattern.match("Anything goes")


def test_keyword_pattern_keeps_lookahead_for_stripped_words() -> None:
    pattern = build_keyword_pattern("!!! walking")

    assert pattern is not None
    assert pattern.pattern == r"^(?=.*\b\b)(?=.*\bwalking\b).*"
    assert pattern.match("The Walking Dead")
    assert not pattern.match("The Running Man")


def test_keyword_pattern_is_case_insensitive() -> None:
    pattern = build_keyword_pattern("WALKING")

    assert pattern is not None
    assert pattern.flags & re.IGNORECASE
    assert pattern.match("the walking dead")


def test_build_filter_without_constraints_copies_base() -> None:
    base = {"type": "movie"}

    query = build_filter(base, None, None)

    assert query == base
    assert query is not base


def test_build_filter_never_mutates_base() -> None:
    base = {"type": "show", "num_seasons": {"$gt": 0}}

    query = build_filter(base, "Sci Fi", "walking dead")

    assert base == {"type": "show", "num_seasons": {"$gt": 0}}
    assert query["type"] == "show"
    assert query["genres"] == "science-fiction"
    assert query["title"] == {
        "$regex": r"^(?=.*\bwalking\b)(?=.*\bdead\b).*",
        "$options": KEYWORD_OPTIONS,
    }


def test_build_filter_genre_all_adds_nothing() -> None:
    assert build_filter({"type": "movie"}, "all", None) == {"type": "movie"}

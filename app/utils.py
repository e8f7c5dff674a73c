"""Utility helpers for the PopContent service."""

from __future__ import annotations

import math
import re
import unicodedata


def slugify(value: str) -> str:
    """Return a URL-friendly slug."""

    value = unicodedata.normalize("NFKD", value)
    value = value.encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value)
    value = value.strip("-")
    value = re.sub(r"-+", "-", value)
    return value.lower()


_DECIMAL_RE = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")
_INFINITY_RE = re.compile(r"^([+-]?)Infinity$")
_RADIX_RE = re.compile(r"^0(?:[xX](?P<hex>[0-9a-fA-F]+)|[oO](?P<oct>[0-7]+)|[bB](?P<bin>[01]+))$")


def parse_page_number(raw: str) -> int | float:
    """Convert a page path segment to a number without range checks.

    Accepts what browsers accept for ``Number()``: decimal and exponent
    notation, ``0x``/``0o``/``0b`` integers and ``Infinity``. Blank input is
    ``0`` and anything else is ``nan``; the storage layer decides whether a
    page number is acceptable.
    """

    text = raw.strip()
    if not text:
        return 0

    radix = _RADIX_RE.match(text)
    if radix:
        if radix.group("hex") is not None:
            return int(radix.group("hex"), 16)
        if radix.group("oct") is not None:
            return int(radix.group("oct"), 8)
        return int(radix.group("bin"), 2)

    infinity = _INFINITY_RE.match(text)
    if infinity:
        return -math.inf if infinity.group(1) == "-" else math.inf

    if not _DECIMAL_RE.match(text):
        return math.nan
    number = float(text)
    if math.isfinite(number) and number.is_integer():
        return int(number)
    return number


def page_count(total: int, page_size: int) -> int:
    """Return how many pages of ``page_size`` are needed for ``total`` items."""

    if total <= 0 or page_size <= 0:
        return 0
    return math.ceil(total / page_size)

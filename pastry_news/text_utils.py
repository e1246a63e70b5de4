"""
Text helpers for article content: slugs, reading time, tags and search.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup

WORDS_PER_MINUTE = 200

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    return _NON_SLUG_CHARS.sub("-", (text or "").lower()).strip("-")


def unique_slug(base: str, taken: Iterable[str], current: Optional[str] = None) -> str:
    """
    Return `base`, or `base-N` with the smallest N >= 2 not in `taken`.

    A record's `current` slug is kept while it still belongs to `base` and no
    other record holds it, so re-saving never moves a published URL.
    """
    taken = set(taken)
    if current and current not in taken and _belongs_to(current, base):
        return current
    if base not in taken:
        return base
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"


def _belongs_to(slug: str, base: str) -> bool:
    if slug == base:
        return True
    prefix, _, suffix = slug.rpartition("-")
    return prefix == base and suffix.isdigit() and int(suffix) >= 2


def strip_html(content: str) -> str:
    if not content:
        return ""
    return BeautifulSoup(content, "html.parser").get_text(" ")


def reading_time(content: str) -> int:
    """Estimated minutes to read `content` at 200 words per minute."""
    words = strip_html(content).split()
    return math.ceil(len(words) / WORDS_PER_MINUTE)


def normalize_tags(tags: Optional[Iterable[str]]) -> list[str]:
    normalized: list[str] = []
    for tag in tags or []:
        value = (tag or "").strip().lower()
        if value and value not in normalized:
            normalized.append(value)
    return normalized


def matches_search(term: str, *fields: Optional[str]) -> bool:
    """Case-insensitive substring match of `term` against any of `fields`."""
    needle = (term or "").strip().lower()
    if not needle:
        return True
    return any(needle in (value or "").lower() for value in fields)

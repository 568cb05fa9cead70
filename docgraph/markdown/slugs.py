"""GitHub-style heading anchor slugs."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List

_DISALLOWED = re.compile(r"[^a-z0-9\s_-]")
_WHITESPACE = re.compile(r"\s+")


def slugify(text: str) -> str:
    """Return the base anchor slug for a heading's plain text."""
    slug = text.lower()
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug.strip())
    return slug.strip("-")


class SlugCounter:
    """Assigns unique slugs to the headings of one document.

    Headings must be fed in document order: the n-th repeat of a base slug
    receives the suffix ``-n`` and the first occurrence stays bare.
    """

    def __init__(self) -> None:
        self._seen: Dict[str, int] = {}

    def next(self, text: str) -> str:
        base = slugify(text)
        count = self._seen.get(base, 0)
        self._seen[base] = count + 1
        if count == 0:
            return base
        return f"{base}-{count}"

    def reset(self) -> None:
        self._seen.clear()


def slugify_all(texts: Iterable[str]) -> List[str]:
    """Return unique slugs for an ordered sequence of heading texts."""
    counter = SlugCounter()
    return [counter.next(text) for text in texts]


__all__ = ["SlugCounter", "slugify", "slugify_all"]

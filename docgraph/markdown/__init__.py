"""Markdown parsing: links, headings, anchors and front-matter."""

from .parser import DocumentParser, ParsedMarkdown, RawLink, parse_markdown, plain_heading_text
from .slugs import SlugCounter, slugify, slugify_all

__all__ = [
    "DocumentParser",
    "ParsedMarkdown",
    "RawLink",
    "SlugCounter",
    "parse_markdown",
    "plain_heading_text",
    "slugify",
    "slugify_all",
]

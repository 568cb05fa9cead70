"""Extraction of links, headings and front-matter from Markdown documents."""

from __future__ import annotations

import hashlib
import re
from bisect import bisect_right
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml
from frontmatter.default_handlers import YAMLHandler

from ..logging import get_logger
from ..models import Document, HeadingSlug, LinkReference
from ..paths import PathResolver, UnresolvableLink
from .slugs import SlugCounter

_FENCE = re.compile(r"^[ \t]*(`{3,}|~{3,})")
_ATX_HEADING = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
_SETEXT_UNDERLINE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_BLOCKQUOTE = re.compile(r"^ {0,3}>[ ]?")
_LIST_ITEM = re.compile(r"^ {0,3}(?:[-+*]|\d{1,9}[.)])(?:[ \t]+|$)")
_THEMATIC_BREAK = re.compile(r"^ {0,3}(?:(?:\*[ \t]*){3,}|(?:_[ \t]*){3,}|(?:-[ \t]*){3,})$")
_CODE_SPAN = re.compile(r"(`+)(.+?)(?<!`)\1(?!`)")
_INLINE_LINK = re.compile(
    r"(?<![!\\])\[(?P<text>(?:[^\[\]\\]|\\.|\[(?:[^\[\]\\]|\\.)*\])*)\]"
    r"\(\s*(?P<target><[^<>\n]*>|(?:[^\s()\\]|\\.|\((?:[^\s()\\]|\\.)*\))*)"
    r"(?:\s+(?:\"[^\"]*\"|'[^']*'|\([^()]*\)))?\s*\)"
)
_REFERENCE_DEFINITION = re.compile(
    r"^ {0,3}\[(?P<label>[^\]^][^\]]*)\]:[ \t]*(?P<target><[^<>\n]*>|\S+)"
)
_AUTOLINK = re.compile(r"<(?P<target>[A-Za-z][A-Za-z0-9+.\-]{1,31}:[^\s<>]*)>")
_EMAIL_AUTOLINK = re.compile(r"<(?P<target>[^\s@<>\\]+@[^\s@<>\\]+\.[^\s@<>\\]+)>")
_HTML_ANCHOR = re.compile(r"<a\s+[^>]*?\b(?:name|id)\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
_HTML_TAG = re.compile(r"</?[A-Za-z][^>]*>")

_IMAGE_IN_TEXT = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_LINK_IN_TEXT = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_REFERENCE_IN_TEXT = re.compile(r"\[([^\]]*)\]\[[^\]]*\]")
_CODE_IN_TEXT = re.compile(r"(`+)(.*?)\1")
_STAR_EMPHASIS = re.compile(r"(?<!\\)(\*{1,3}|~~)(\S(?:.*?[^\s\\])?)\1")
_UNDERSCORE_EMPHASIS = re.compile(r"(?<![A-Za-z0-9])(_{1,3})(\S(?:.*?\S)?)\1(?![A-Za-z0-9])")
_ESCAPED_PUNCTUATION = re.compile(r"\\([!-/:-@\[-`{-~])")

_FRONTMATTER = YAMLHandler()

logger = get_logger("markdown.parser")


@dataclass(frozen=True)
class RawLink:
    """Link target as written in the document, before resolution."""

    target: str
    line: int
    column: int
    kind: str = "inline"


@dataclass
class ParsedMarkdown:
    """Syntax-level extraction result for one Markdown text."""

    links: List[RawLink] = field(default_factory=list)
    headings: List[HeadingSlug] = field(default_factory=list)
    anchors: List[str] = field(default_factory=list)
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


def parse_markdown(text: str) -> ParsedMarkdown:
    """Extract links, headings and front-matter from Markdown ``text``.

    Code blocks and code spans are never scanned for links or headings.
    Line and column numbers are 1-based and refer to ``text`` including any
    front-matter block.
    """
    result = ParsedMarkdown()
    text = text.lstrip("\ufeff")
    lines = text.splitlines()

    metadata, block_lines, warning = _read_frontmatter(text)
    if warning:
        result.warnings.append(warning)
    result.frontmatter = metadata
    for index in range(min(block_lines, len(lines))):
        lines[index] = ""

    counter = SlugCounter()
    fence: Optional[str] = None
    in_comment = False
    in_list = False
    previous_blank = True
    # Candidate setext heading text.
    paragraph: List[Tuple[int, str]] = []
    # Masked lines whose links are extracted together, so link text may wrap.
    block: List[Tuple[int, str]] = []

    for number, raw_line in enumerate(lines, start=1):
        if fence is not None:
            inner = _strip_blockquote(raw_line).strip()
            if inner.startswith(fence) and not inner.strip(fence[0]):
                fence = None
            continue

        line, in_comment = _mask_comments(raw_line, in_comment)
        inner = _strip_blockquote(line)
        stripped = inner.strip()

        if not stripped:
            block = _flush_links(block, result.links)
            paragraph = []
            previous_blank = True
            continue

        fence_match = _FENCE.match(inner)
        if fence_match:
            marker = fence_match.group(1)
            # Backtick fences may not carry backticks in their info string.
            if marker[0] == "~" or "`" not in inner[fence_match.end() :]:
                fence = marker
                block = _flush_links(block, result.links)
                paragraph = []
                previous_blank = False
                continue

        indented = inner.startswith("    ") or inner.startswith("\t")
        if indented and not paragraph and not in_list:
            block = _flush_links(block, result.links)
            previous_blank = False
            continue
        list_item = _LIST_ITEM.match(inner) is not None
        if list_item:
            in_list = True
        elif not indented and previous_blank:
            in_list = False
        previous_blank = False

        masked = _CODE_SPAN.sub(lambda m: " " * len(m.group(0)), line)
        result.anchors.extend(_HTML_ANCHOR.findall(masked))

        heading = _ATX_HEADING.match(inner)
        if heading:
            level = len(heading.group(1))
            plain = plain_heading_text(heading.group(2) or "")
            result.headings.append(
                HeadingSlug(slug=counter.next(plain), line=number, level=level, text=plain)
            )
            block = _flush_links(block, result.links)
            _flush_links([(number, masked)], result.links)
            paragraph = []
            continue

        underline = _SETEXT_UNDERLINE.match(inner)
        if underline and paragraph:
            level = 1 if underline.group(1).startswith("=") else 2
            plain = plain_heading_text(" ".join(text for _, text in paragraph))
            result.headings.append(
                HeadingSlug(slug=counter.next(plain), line=paragraph[0][0], level=level, text=plain)
            )
            block = _flush_links(block, result.links)
            paragraph = []
            continue

        # A definition cannot interrupt a paragraph.
        definition = None if block else _REFERENCE_DEFINITION.match(masked)
        if definition:
            result.links.append(
                RawLink(
                    target=definition.group("target"),
                    line=number,
                    column=_leading_spaces(masked) + 1,
                    kind="definition",
                )
            )
            paragraph = []
            continue

        table_row = stripped.startswith("|")
        thematic_break = _THEMATIC_BREAK.match(inner) is not None
        if list_item or table_row or thematic_break:
            block = _flush_links(block, result.links)
        block.append((number, masked))
        if table_row or thematic_break:
            block = _flush_links(block, result.links)

        # List items and their continuation lines never become setext headings.
        if in_list or thematic_break or table_row or _BLOCKQUOTE.match(line):
            paragraph = []
        else:
            paragraph.append((number, stripped))

    _flush_links(block, result.links)
    return result


def plain_heading_text(text: str) -> str:
    """Reduce inline Markdown in a heading to the text a reader sees."""
    text = _IMAGE_IN_TEXT.sub(r"\1", text)
    text = _LINK_IN_TEXT.sub(r"\1", text)
    text = _REFERENCE_IN_TEXT.sub(r"\1", text)
    text = _CODE_IN_TEXT.sub(r"\2", text)
    text = _HTML_TAG.sub("", text)
    text = _STAR_EMPHASIS.sub(r"\2", text)
    text = _UNDERSCORE_EMPHASIS.sub(r"\2", text)
    text = _ESCAPED_PUNCTUATION.sub(r"\1", text)
    return text.strip()


def content_hash(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class DocumentParser:
    """Builds :class:`Document` objects with links resolved to paths."""

    def __init__(self, resolver: PathResolver) -> None:
        self.resolver = resolver

    def parse(self, path: Path, content: str) -> Document:
        path = self.resolver.canonical(path)
        parsed = parse_markdown(content)
        for warning in parsed.warnings:
            logger.warning("%s: %s", path, warning)

        links = [self._resolve(path, raw) for raw in parsed.links]
        return Document(
            path=path,
            content=content,
            content_hash=content_hash(content),
            links=links,
            headings=parsed.headings,
            anchors=parsed.anchors,
            frontmatter=parsed.frontmatter,
            warnings=parsed.warnings,
        )

    def _resolve(self, source: Path, raw: RawLink) -> LinkReference:
        try:
            resolved = self.resolver.resolve(source, raw.target)
        except UnresolvableLink as exc:
            return LinkReference(
                source=source,
                raw=raw.target,
                line=raw.line,
                column=raw.column,
                kind=raw.kind,
                error=str(exc),
            )
        return LinkReference(
            source=source,
            raw=raw.target,
            line=raw.line,
            column=raw.column,
            target=resolved.path,
            fragment=resolved.fragment,
            external=resolved.external,
            kind=raw.kind,
        )


def _flush_links(block: Sequence[Tuple[int, str]], links: List[RawLink]) -> List[Tuple[int, str]]:
    """Append the links found in ``block`` to ``links`` and return an empty block.

    The lines are matched as one text, then each match offset is mapped back
    to its line and column.
    """
    if not block:
        return []
    text = "\n".join(line for _, line in block)
    starts: List[int] = []
    offset = 0
    for _, line in block:
        starts.append(offset)
        offset += len(line) + 1

    def locate(position: int) -> Tuple[int, int]:
        index = bisect_right(starts, position) - 1
        return block[index][0], position - starts[index] + 1

    found: List[Tuple[int, RawLink]] = []
    spans: List[Tuple[int, int]] = []
    for match in _INLINE_LINK.finditer(text):
        line, column = locate(match.start())
        found.append((match.start(), RawLink(target=match.group("target"), line=line, column=column)))
        spans.append(match.span())
    for pattern in (_AUTOLINK, _EMAIL_AUTOLINK):
        for match in pattern.finditer(text):
            if any(start <= match.start() < end for start, end in spans):
                continue
            target = match.group("target")
            if pattern is _EMAIL_AUTOLINK:
                target = f"mailto:{target}"
            line, column = locate(match.start())
            found.append((match.start(), RawLink(target=target, line=line, column=column, kind="autolink")))
    found.sort(key=lambda item: item[0])
    links.extend(link for _, link in found)
    return []


def _read_frontmatter(text: str) -> Tuple[Dict[str, Any], int, Optional[str]]:
    """Return (metadata, number of lines in the block, warning)."""
    if not _FRONTMATTER.detect(text):
        return {}, 0, None
    try:
        raw, body = _FRONTMATTER.split(text)
    except ValueError:
        return {}, 0, None

    block_lines = text[: len(text) - len(body)].count("\n") + 1
    try:
        metadata = _FRONTMATTER.load(raw)
    except yaml.YAMLError as exc:
        summary = str(exc).splitlines()[0] if str(exc) else exc.__class__.__name__
        return {}, block_lines, f"malformed front-matter ignored: {summary}"
    if metadata is None:
        return {}, block_lines, None
    if not isinstance(metadata, dict):
        return {}, block_lines, "front-matter is not a mapping; ignored"
    return metadata, block_lines, None


def _mask_comments(line: str, in_comment: bool) -> Tuple[str, bool]:
    if "<!--" not in line and not in_comment:
        return line, False
    chars = list(line)
    position = 0
    while position < len(line):
        if in_comment:
            end = line.find("-->", position)
            stop = len(line) if end == -1 else end + 3
            for index in range(position, stop):
                chars[index] = " "
            if end == -1:
                return "".join(chars), True
            in_comment = False
            position = stop
        else:
            start = line.find("<!--", position)
            if start == -1:
                break
            in_comment = True
            position = start
    return "".join(chars), in_comment


def _strip_blockquote(line: str) -> str:
    while True:
        match = _BLOCKQUOTE.match(line)
        if match is None:
            return line
        line = line[match.end() :]


def _leading_spaces(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


__all__ = [
    "DocumentParser",
    "ParsedMarkdown",
    "RawLink",
    "content_hash",
    "parse_markdown",
    "plain_heading_text",
]

"""Concatenated and structured output of graph document contents."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import ConfigurationError
from .graph.model import DocumentGraph
from .logging import get_logger

ORDERS = ("deps", "alpha")
DEFAULT_SEPARATOR = "\n\n"

logger = get_logger("content")


def unescape_separator(value: str) -> str:
    """Expand the ``\\n``, ``\\t`` and ``\\r`` escapes typed on a shell."""
    return value.replace("\\n", "\n").replace("\\t", "\t").replace("\\r", "\r")


def count_words(text: str) -> int:
    return len(text.split())


def count_lines(text: str) -> int:
    return len(text.split("\n"))


class ContentOutputter:
    def __init__(self, graph: DocumentGraph) -> None:
        self.graph = graph

    def ordered(self, order: str = "deps", files: Optional[Sequence[Path]] = None) -> List[Path]:
        """Graph files in ``order``, optionally restricted to ``files``."""
        if order not in ORDERS:
            raise ConfigurationError(f"Invalid order: {order}. Must be one of: {', '.join(ORDERS)}")
        paths = self.graph.dependency_order()
        if order == "alpha":
            paths = sorted(paths, key=lambda path: path.as_posix())

        if files:
            missing = [path for path in files if path not in self.graph]
            if missing:
                listed = ", ".join(self.graph.relative(path) for path in missing)
                raise ConfigurationError(f"Not in the documentation graph: {listed}")
            wanted = set(files)
            paths = [path for path in paths if path in wanted]

        readable = [path for path in paths if self.graph.document(path) is not None]
        for path in paths:
            if path not in readable:
                logger.warning("Skipping unreadable file %s", self.graph.relative(path))
        return readable

    def render_markdown(self, paths: Sequence[Path], separator: str = DEFAULT_SEPARATOR) -> str:
        chunks: List[str] = []
        for path in paths:
            content = self.graph.document(path).content
            if content.endswith("\n"):
                content = content[:-1]
            chunks.append(content)
            logger.debug("Emitting %s", self.graph.relative(path))
        if not chunks:
            return ""
        return separator.join(chunks) + "\n"

    def render_json(self, paths: Sequence[Path]) -> List[Dict[str, object]]:
        records: List[Dict[str, object]] = []
        for path in paths:
            content = self.graph.document(path).content
            records.append(
                {
                    "file": self.graph.relative(path),
                    "depth": self.graph.depth_of(path),
                    "content": content,
                    "wordCount": count_words(content),
                    "lineCount": count_lines(content),
                }
            )
        return records


__all__ = [
    "ContentOutputter",
    "DEFAULT_SEPARATOR",
    "ORDERS",
    "count_lines",
    "count_words",
    "unescape_separator",
]

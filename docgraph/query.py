"""Front-matter filtering with JMESPath expressions."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional

import jmespath
from jmespath.exceptions import JMESPathError, ParseError

from .config import ConfigurationError
from .graph.model import DocumentGraph
from .logging import get_logger
from .models import Document

logger = get_logger("query")


def compile_query(expression: str):
    """Compile ``expression`` or raise :class:`ConfigurationError`."""
    if not expression or not expression.strip():
        raise ConfigurationError("Front-matter query must not be empty")
    try:
        return jmespath.compile(expression)
    except ParseError as exc:
        raise ConfigurationError(f"Invalid front-matter query '{expression}': {exc}") from exc


def frontmatter_matches(frontmatter: Mapping[str, Any], query) -> bool:
    try:
        result = query.search(dict(frontmatter))
    except JMESPathError as exc:
        logger.debug("Front-matter query failed: %s", exc)
        return False
    return bool(result)


def filter_by_frontmatter(
    graph: DocumentGraph,
    expression: str,
    paths: Optional[Iterable[Path]] = None,
    load: Optional[Callable[[Path], Document]] = None,
) -> List[Path]:
    """Return the files whose front-matter makes ``expression`` truthy.

    ``paths`` defaults to every graph document. Documents outside the graph
    (orphans, for instance) are read through ``load`` when it is given.
    """
    query = compile_query(expression)
    candidates = list(paths) if paths is not None else graph.files()
    matched: List[Path] = []
    for path in candidates:
        document = graph.document(path)
        if document is None and load is not None:
            try:
                document = load(path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Skipping %s: %s", path, exc)
                continue
        if document is None:
            continue
        if frontmatter_matches(document.frontmatter, query):
            matched.append(path)
    logger.debug("%d file(s) match front-matter query %s", len(matched), expression)
    return matched


__all__ = ["compile_query", "filter_by_frontmatter", "frontmatter_matches"]

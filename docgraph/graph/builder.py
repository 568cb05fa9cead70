"""Breadth-first construction of the document reachability graph."""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import ConfigurationError
from ..exclusion import ExclusionFilter
from ..logging import get_logger
from ..models import DiagnosticKind, Document, Finding
from ..scanner import DocumentStore
from .model import DocumentGraph

logger = get_logger("graph.builder")

_LoadResult = Tuple[Path, Optional[Document], Optional[Exception]]


class GraphBuilder:
    """Traverses links from the entrypoints one depth level at a time.

    All entrypoints share one frontier, so a document's depth is its minimum
    distance from any of them. Documents at the depth bound are parsed (their
    links are still validated) but nothing they link to is enqueued.
    With a ``scope_root``, links leaving that directory are validated but the
    documents behind them are never visited.
    """

    def __init__(
        self,
        store: DocumentStore,
        exclusion: ExclusionFilter | None = None,
        *,
        max_depth: float = math.inf,
        max_concurrency: int = 1,
        scope_root: Path | None = None,
    ) -> None:
        if max_depth < 0:
            raise ConfigurationError(f"Depth must be non-negative, got {max_depth}")
        self.store = store
        self.resolver = store.parser.resolver
        self.exclusion = exclusion
        self.max_depth = max_depth
        self.max_concurrency = max(1, int(max_concurrency))
        self.scope_root = None if scope_root is None else self.resolver.canonical(scope_root)
        self._eligible: Dict[Path, bool] = {}

    def build(self, entrypoints: Sequence[Path | str]) -> DocumentGraph:
        roots = self.resolve_entrypoints(entrypoints)
        graph = DocumentGraph(root=self.resolver.root, entrypoints=list(roots))
        for path in roots:
            graph.add_node(path, 0)

        candidate_edges: List[Tuple[Path, Path]] = []
        frontier = list(roots)
        depth = 0
        while frontier:
            logger.debug("Visiting %d document(s) at depth %d", len(frontier), depth)
            next_frontier: List[Path] = []
            for path, document, error in self._load_level(frontier):
                if document is None:
                    graph.findings.append(
                        Finding(
                            kind=DiagnosticKind.UNREADABLE_FILE,
                            file=path,
                            message=f"Cannot read file: {error}",
                        )
                    )
                    logger.warning("Cannot read %s: %s", path, error)
                    continue

                graph.node(path).document = document
                for link in document.links:
                    target = link.target
                    if link.external or target is None or target == path:
                        continue
                    if target not in graph and not (self._in_scope(target) and self._is_eligible(target)):
                        continue
                    candidate_edges.append((path, target))
                    if target in graph or depth >= self.max_depth:
                        continue
                    graph.add_node(target, depth + 1)
                    next_frontier.append(target)
            frontier = next_frontier
            depth += 1

        # Edges into documents that never joined the graph are not counted.
        for source, target in candidate_edges:
            graph.add_edge(source, target)

        logger.debug("Graph contains %d document(s)", len(graph))
        return graph

    def resolve_entrypoints(self, entrypoints: Sequence[Path | str]) -> List[Path]:
        if not entrypoints:
            raise ConfigurationError("At least one entrypoint is required")
        roots: List[Path] = []
        for entry in entrypoints:
            path = self.resolver.canonical(entry)
            if not path.is_file():
                raise ConfigurationError(f"Entrypoint not found: {entry}")
            if not self._in_scope(path):
                raise ConfigurationError(f"Entrypoint outside scope root {self.scope_root}: {entry}")
            if path not in roots:
                roots.append(path)
        return roots

    def _in_scope(self, path: Path) -> bool:
        if self.scope_root is None:
            return True
        try:
            path.relative_to(self.scope_root)
        except ValueError:
            return False
        return True

    def _is_eligible(self, path: Path) -> bool:
        cached = self._eligible.get(path)
        if cached is None:
            cached = (
                self.resolver.is_document(path)
                and path.is_file()
                and not (self.exclusion is not None and self.exclusion.is_excluded(path))
            )
            self._eligible[path] = cached
        return cached

    def _load_level(self, frontier: List[Path]) -> List[_LoadResult]:
        if self.max_concurrency == 1 or len(frontier) == 1:
            return [self._load(path) for path in frontier]
        workers = min(self.max_concurrency, len(frontier))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map() yields in submission order, so replay matches a sequential walk.
            return list(pool.map(self._load, frontier))

    def _load(self, path: Path) -> _LoadResult:
        try:
            return path, self.store.load(path), None
        except (OSError, UnicodeDecodeError) as exc:
            return path, None, exc


__all__ = ["GraphBuilder"]

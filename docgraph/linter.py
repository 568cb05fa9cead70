"""Pipeline tying traversal, validation and aggregation together."""

from __future__ import annotations

import math
from pathlib import Path
from typing import List, Optional, Sequence

from .config import ConfigurationError, LintConfig
from .diagnostics import DiagnosticsAggregator, LintReport
from .exclusion import ExclusionFilter
from .graph import DocumentGraph, GraphBuilder
from .logging import get_logger
from .markdown.parser import DocumentParser
from .models import Document, Finding
from .paths import PathResolver
from .scanner import DocumentStore, find_documents
from .validators import LinkValidator, OrphanDetector, find_orphans


class DocLinter:
    """Runs one lint pass over a documentation tree.

    The graph is built once per instance and shared by the validators and
    by the ``files``/``cat``/``deps`` collaborators.
    """

    def __init__(
        self,
        config: LintConfig,
        *,
        exclusion: ExclusionFilter | None = None,
        store: DocumentStore | None = None,
        aggregator: DiagnosticsAggregator | None = None,
    ) -> None:
        self.config = config
        self.logger = get_logger("linter")
        if store is None:
            resolver = PathResolver(config.root, extensions=config.extensions)
            store = DocumentStore(DocumentParser(resolver))
        self.store = store
        self.resolver = store.parser.resolver
        self.exclusion = exclusion or ExclusionFilter.from_config(config)
        self.aggregator = aggregator or DiagnosticsAggregator(config.rules)
        self._graph: Optional[DocumentGraph] = None
        self._eligible: Optional[List[Path]] = None

    @property
    def root(self) -> Path:
        return self.resolver.root

    def graph(self) -> DocumentGraph:
        if self._graph is None:
            self._graph = self.build_graph()
        return self._graph

    def build_graph(
        self,
        entrypoints: Sequence[Path | str] | None = None,
        *,
        max_depth: float | None = None,
    ) -> DocumentGraph:
        builder = GraphBuilder(
            self.store,
            self.exclusion,
            max_depth=self.config.max_depth if max_depth is None else max_depth,
            max_concurrency=self.config.max_concurrency,
            scope_root=self.config.scope_path,
        )
        targets = list(entrypoints) if entrypoints is not None else list(self.config.entrypoints)
        self.logger.debug(
            "Building graph from %s (depth %s)",
            ", ".join(str(item) for item in targets),
            "unlimited" if builder.max_depth == math.inf else int(builder.max_depth),
        )
        return builder.build(targets)

    def eligible_documents(self) -> List[Path]:
        """Documents below the scope root (or the project root) that pass exclusion."""
        if self._eligible is None:
            base = self.root
            if self.config.scope_path is not None:
                base = self.resolver.canonical(self.config.scope_path)
                if not base.is_dir():
                    raise ConfigurationError(f"Scope root is not a directory: {self.config.scope_root}")
            self._eligible = [
                self.resolver.canonical(path)
                for path in find_documents(base, self.exclusion, self.config.extensions)
            ]
        return list(self._eligible)

    def orphans(self) -> List[Path]:
        return find_orphans(self.graph(), self.eligible_documents())

    def document(self, path: Path) -> Document:
        """Return the parsed document for ``path``, loading it if necessary."""
        return self.store.load(path)

    def findings(self) -> List[Finding]:
        graph = self.graph()
        findings: List[Finding] = list(graph.findings)
        findings.extend(OrphanDetector().detect(graph, self.eligible_documents()))
        findings.extend(LinkValidator(self.store).validate(graph))
        return findings

    def lint(self) -> LintReport:
        self.logger.info("Linting documentation in %s", self.root)
        findings = self.findings()
        report = self.aggregator.report(self.root, findings, files_checked=len(self.graph()))
        self.logger.debug(
            "Lint finished: %d error(s), %d warning(s)", report.error_count, report.warning_count
        )
        return report


__all__ = ["DocLinter"]

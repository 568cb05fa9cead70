"""Detection of eligible documents no entrypoint reaches."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from ..graph.model import DocumentGraph
from ..models import DiagnosticKind, Finding


class OrphanDetector:
    def detect(self, graph: DocumentGraph, eligible: Iterable[Path]) -> List[Finding]:
        """Return one finding per eligible document missing from ``graph``."""
        findings: List[Finding] = []
        for path in sorted(set(eligible)):
            if path in graph:
                continue
            findings.append(
                Finding(
                    kind=DiagnosticKind.ORPHAN_FILE,
                    file=path,
                    message="Orphan file: not reachable from any entrypoint",
                )
            )
        return findings


def find_orphans(graph: DocumentGraph, eligible: Iterable[Path]) -> List[Path]:
    return [finding.file for finding in OrphanDetector().detect(graph, eligible)]


__all__ = ["OrphanDetector", "find_orphans"]

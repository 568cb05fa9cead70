"""Incoming and outgoing dependency trees for a single document."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set, Tuple

from .config import ConfigurationError
from .graph.model import DocumentGraph


@dataclass
class DependencyNode:
    path: Path
    depth: int
    children: List["DependencyNode"] = field(default_factory=list)
    cycle: bool = False

    def count(self) -> int:
        return 1 + sum(child.count() for child in self.children)

    def to_dict(self, graph: DocumentGraph) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "file": graph.relative(self.path),
            "depth": self.depth,
            "children": [child.to_dict(graph) for child in self.children],
        }
        if self.cycle:
            payload["cycle"] = True
        return payload


@dataclass
class DependencyReport:
    """Dependency trees rooted at ``file``.

    ``cycles`` holds (from, to) pairs; a pair and its reverse count once.
    """

    file: Path
    incoming: List[DependencyNode] = field(default_factory=list)
    outgoing: List[DependencyNode] = field(default_factory=list)
    cycles: List[Tuple[Path, Path]] = field(default_factory=list)

    @property
    def incoming_count(self) -> int:
        return sum(node.count() for node in self.incoming)

    @property
    def outgoing_count(self) -> int:
        return sum(node.count() for node in self.outgoing)

    def to_dict(self, graph: DocumentGraph) -> Dict[str, object]:
        return {
            "file": graph.relative(self.file),
            "incoming": [node.to_dict(graph) for node in self.incoming],
            "outgoing": [node.to_dict(graph) for node in self.outgoing],
            "cycles": [
                {"from": graph.relative(source), "to": graph.relative(target)}
                for source, target in self.cycles
            ],
            "stats": {
                "incomingCount": self.incoming_count,
                "outgoingCount": self.outgoing_count,
                "cyclesDetected": len(self.cycles),
            },
        }


class DependencyAnalyzer:
    def __init__(self, graph: DocumentGraph) -> None:
        self.graph = graph

    def analyze(
        self,
        path: Path,
        *,
        include_incoming: bool = True,
        include_outgoing: bool = True,
        max_depth: float = math.inf,
    ) -> DependencyReport:
        if path not in self.graph:
            raise ConfigurationError(f"File is not part of the documentation graph: {path}")

        report = DependencyReport(file=path)
        cycles: List[Tuple[Path, Path]] = []
        if include_incoming:
            report.incoming = self._tree(path, {path}, 0, max_depth, cycles, incoming=True)
        if include_outgoing:
            report.outgoing = self._tree(path, {path}, 0, max_depth, cycles, incoming=False)
        report.cycles = _unique_cycles(cycles)
        return report

    def _tree(
        self,
        path: Path,
        on_path: Set[Path],
        depth: int,
        max_depth: float,
        cycles: List[Tuple[Path, Path]],
        *,
        incoming: bool,
    ) -> List[DependencyNode]:
        if depth >= max_depth:
            return []
        node = self.graph.node(path)
        neighbours = node.incoming if incoming else node.outgoing

        result: List[DependencyNode] = []
        for neighbour in neighbours:
            if neighbour in on_path:
                result.append(DependencyNode(path=neighbour, depth=depth + 1, cycle=True))
                cycles.append((neighbour, path) if incoming else (path, neighbour))
                continue
            on_path.add(neighbour)
            children = self._tree(neighbour, on_path, depth + 1, max_depth, cycles, incoming=incoming)
            on_path.discard(neighbour)
            result.append(DependencyNode(path=neighbour, depth=depth + 1, children=children))
        return result


def _unique_cycles(cycles: List[Tuple[Path, Path]]) -> List[Tuple[Path, Path]]:
    seen: Set[Tuple[Path, Path]] = set()
    unique: List[Tuple[Path, Path]] = []
    for source, target in cycles:
        if (source, target) in seen or (target, source) in seen:
            continue
        seen.add((source, target))
        unique.append((source, target))
    return unique


__all__ = ["DependencyAnalyzer", "DependencyNode", "DependencyReport"]

"""Reachability graph produced by a traversal."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

from ..models import Document, Finding


@dataclass
class GraphNode:
    """A reached document with its minimum depth and distinct edges."""

    path: Path
    depth: int
    incoming: List[Path] = field(default_factory=list)
    outgoing: List[Path] = field(default_factory=list)
    document: Optional[Document] = None

    @property
    def incoming_count(self) -> int:
        return len(self.incoming)

    @property
    def outgoing_count(self) -> int:
        return len(self.outgoing)

    @property
    def frontmatter(self) -> Dict[str, object]:
        return self.document.frontmatter if self.document is not None else {}


@dataclass
class DocumentGraph:
    """Mapping of reached documents, kept in breadth-first discovery order."""

    root: Path
    entrypoints: List[Path] = field(default_factory=list)
    nodes: Dict[Path, GraphNode] = field(default_factory=dict)
    findings: List[Finding] = field(default_factory=list)
    _edges: Set[Tuple[Path, Path]] = field(default_factory=set, repr=False)

    def __contains__(self, path: object) -> bool:
        return path in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(self.nodes.values())

    def add_node(self, path: Path, depth: int) -> GraphNode:
        node = self.nodes.get(path)
        if node is None:
            node = GraphNode(path=path, depth=depth)
            self.nodes[path] = node
        elif depth < node.depth:
            node.depth = depth
        return node

    def add_edge(self, source: Path, target: Path) -> bool:
        """Record ``source -> target`` once; both ends must be nodes."""
        if source == target or source not in self.nodes or target not in self.nodes:
            return False
        if (source, target) in self._edges:
            return False
        self._edges.add((source, target))
        self.nodes[source].outgoing.append(target)
        self.nodes[target].incoming.append(source)
        return True

    @property
    def edges(self) -> List[Tuple[Path, Path]]:
        return [(node.path, target) for node in self.nodes.values() for target in node.outgoing]

    def node(self, path: Path) -> GraphNode:
        return self.nodes[path]

    def files(self) -> List[Path]:
        return list(self.nodes)

    def depth_of(self, path: Path) -> Optional[int]:
        node = self.nodes.get(path)
        return node.depth if node is not None else None

    def document(self, path: Path) -> Optional[Document]:
        node = self.nodes.get(path)
        return node.document if node is not None else None

    def documents(self) -> List[Document]:
        return [node.document for node in self.nodes.values() if node.document is not None]

    def dependency_order(self) -> List[Path]:
        """Entrypoints first, then every document in the order it was reached."""
        return self.files()

    def relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()


__all__ = ["DocumentGraph", "GraphNode"]

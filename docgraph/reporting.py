"""Plain-text and JSON rendering of lint, files and deps results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import ConfigurationError
from .deps import DependencyNode, DependencyReport
from .diagnostics import LintReport
from .graph.model import DocumentGraph

SORT_KEYS = ("alpha", "depth", "incoming", "outgoing")
RULE_WIDTH = 50


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def format_lint_text(report: LintReport) -> str:
    if not report.diagnostics:
        return f"No issues found ({_plural(report.files_checked, 'file')} checked)\n"

    lines: List[str] = []
    for path, diagnostics in report.by_file().items():
        lines.append(_display(path, report.root))
        for item in diagnostics:
            location = f"{item.line}:{item.column}" if item.line is not None else "-"
            lines.append(f"  {location} {item.severity.value} {item.message} [{item.rule}]")
        lines.append("")
    lines.append(f"{report.error_count} error(s), {report.warning_count} warning(s)")
    return "\n".join(lines) + "\n"


def format_lint_json(report: LintReport) -> str:
    payload = [item.to_dict(report.root) for item in report.diagnostics]
    return json.dumps(payload, indent=2) + "\n"


def sort_files(paths: Sequence[Path], graph: DocumentGraph, key: str = "alpha") -> List[Path]:
    """Order ``paths``; ties and non-graph files fall back to alphabetical."""
    if key not in SORT_KEYS:
        raise ConfigurationError(f"Invalid sort option: {key}. Must be one of: {', '.join(SORT_KEYS)}")
    alphabetical = sorted(paths, key=lambda path: path.as_posix())
    if key == "alpha":
        return alphabetical

    def metric(path: Path) -> int:
        node = graph.nodes.get(path)
        if key == "depth":
            return node.depth if node is not None else 1 << 30
        if node is None:
            return 0
        # Most connected first.
        return -(node.incoming_count if key == "incoming" else node.outgoing_count)

    return sorted(alphabetical, key=metric)


def format_files(
    paths: Sequence[Path],
    graph: DocumentGraph,
    *,
    fmt: str = "list",
    absolute: bool = False,
    with_depth: bool = False,
    print0: bool = False,
    orphans: bool = False,
) -> str:
    def shown(path: Path) -> str:
        return path.as_posix() if absolute else graph.relative(path)

    if fmt == "json":
        records = [
            {"file": shown(path), "depth": graph.depth_of(path), "orphan": orphans} for path in paths
        ]
        return json.dumps(records, indent=2) + "\n"
    if fmt != "list":
        raise ConfigurationError(f"Invalid format: {fmt}. Must be one of: list, json")

    entries: List[str] = []
    for path in paths:
        entry = shown(path)
        if with_depth:
            depth = graph.depth_of(path)
            entry = f"{'orphan' if depth is None else depth} {entry}"
        entries.append(entry)
    if print0:
        return "\0".join(entries)
    return "".join(f"{entry}\n" for entry in entries)


def format_deps(
    report: DependencyReport,
    graph: DocumentGraph,
    *,
    fmt: str = "tree",
    show_incoming: bool = True,
    show_outgoing: bool = True,
) -> str:
    if fmt == "json":
        return json.dumps(report.to_dict(graph), indent=2) + "\n"
    if fmt not in ("tree", "list"):
        raise ConfigurationError(f"Invalid format: {fmt}. Must be one of: tree, list, json")

    lines: List[str] = [graph.relative(report.file), "-" * RULE_WIDTH, ""]
    sections = []
    if show_incoming:
        title = f"Incoming ({_plural(report.incoming_count, 'file')} reference this):"
        sections.append((title, report.incoming))
    if show_outgoing:
        title = f"Outgoing ({_plural(report.outgoing_count, 'file')} referenced by this):"
        sections.append((title, report.outgoing))

    for title, nodes in sections:
        if not nodes:
            lines.append(title.split(" (", 1)[0] + ":")
            lines.append("None")
        elif fmt == "tree":
            lines.append(title)
            _tree_lines(nodes, "", graph, lines)
        else:
            lines.append(title.split(" (", 1)[0] + ":")
            lines.extend(f"- {graph.relative(path)}" for path in _flatten(nodes))
        lines.append("")

    if fmt == "list":
        lines.append(f"Total: {report.incoming_count} incoming, {report.outgoing_count} outgoing")
    if report.cycles:
        lines.append(f"{_plural(len(report.cycles), 'cycle')} detected:")
        for source, target in report.cycles:
            lines.append(f"  - {graph.relative(source)} -> {graph.relative(target)}")
    return "\n".join(lines).rstrip("\n") + "\n"


def _tree_lines(nodes: Sequence[DependencyNode], prefix: str, graph: DocumentGraph, out: List[str]) -> None:
    for index, node in enumerate(nodes):
        last = index == len(nodes) - 1
        label = graph.relative(node.path)
        if node.cycle:
            label += " [cycle]"
        out.append(f"{prefix}{'`-- ' if last else '|-- '}{label}")
        if node.children and not node.cycle:
            _tree_lines(node.children, prefix + ("    " if last else "|   "), graph, out)


def _flatten(nodes: Sequence[DependencyNode]) -> List[Path]:
    seen: Dict[Path, None] = {}

    def visit(node: DependencyNode) -> None:
        seen.setdefault(node.path, None)
        for child in node.children:
            if not child.cycle:
                visit(child)

    for node in nodes:
        visit(node)
    return list(seen)


def _display(path: Path, root: Optional[Path]) -> str:
    if root is None:
        return path.as_posix()
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


__all__ = [
    "SORT_KEYS",
    "format_deps",
    "format_files",
    "format_lint_json",
    "format_lint_text",
    "sort_files",
]

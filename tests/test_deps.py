"""Tests for docgraph.deps."""

from __future__ import annotations

import pytest

from docgraph.config import ConfigurationError
from docgraph.deps import DependencyAnalyzer
from tests._fixtures.docs_builder import DocsBuilder


@pytest.fixture
def linked_docs(docs_builder: DocsBuilder) -> DocsBuilder:
    docs_builder.write(
        {
            "README.md": "[guide](guide.md) [api](api.md)\n",
            "guide.md": "[api](api.md) [home](README.md)\n",
            "api.md": "[models](models.md)\n",
            "models.md": "# Models\n",
        }
    )
    return docs_builder


def test_outgoing_tree_follows_links(linked_docs: DocsBuilder) -> None:
    graph = linked_docs.linter().graph()
    api = linked_docs.file("api.md")

    report = DependencyAnalyzer(graph).analyze(api, include_incoming=False)

    assert report.incoming == []
    assert [graph.relative(node.path) for node in report.outgoing] == ["models.md"]
    assert report.outgoing_count == 1
    assert report.cycles == []


def test_incoming_tree_and_cycles(linked_docs: DocsBuilder) -> None:
    graph = linked_docs.linter().graph()
    guide = linked_docs.file("guide.md")

    report = DependencyAnalyzer(graph).analyze(guide)

    incoming = report.incoming
    assert [graph.relative(node.path) for node in incoming] == ["README.md"]
    # README links back to guide, which is already on the path.
    assert [(graph.relative(node.path), node.cycle) for node in incoming[0].children] == [
        ("guide.md", True)
    ]
    outgoing = [graph.relative(node.path) for node in report.outgoing]
    assert outgoing == ["api.md", "README.md"]
    # guide -> README -> guide is found from both directions but reported once.
    assert len(report.cycles) == 1
    assert set(report.cycles[0]) == {guide, linked_docs.file("README.md")}


def test_max_depth_truncates_trees(linked_docs: DocsBuilder) -> None:
    graph = linked_docs.linter().graph()

    report = DependencyAnalyzer(graph).analyze(linked_docs.file("README.md"), max_depth=1)

    assert all(node.children == [] for node in report.outgoing)
    assert report.outgoing_count == 2


def test_to_dict_reports_stats(linked_docs: DocsBuilder) -> None:
    graph = linked_docs.linter().graph()

    payload = DependencyAnalyzer(graph).analyze(linked_docs.file("models.md"), include_outgoing=False).to_dict(graph)

    assert payload["file"] == "models.md"
    assert payload["outgoing"] == []
    assert payload["incoming"][0]["file"] == "api.md"
    assert payload["stats"]["outgoingCount"] == 0
    assert payload["stats"]["incomingCount"] >= 3


def test_file_outside_graph_is_rejected(linked_docs: DocsBuilder) -> None:
    linked_docs.write({"lonely.md": "# Lonely\n"})
    graph = linked_docs.linter().graph()

    with pytest.raises(ConfigurationError, match="not part of the documentation graph"):
        DependencyAnalyzer(graph).analyze(linked_docs.file("lonely.md"))

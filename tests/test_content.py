"""Tests for docgraph.content."""

from __future__ import annotations

import pytest

from docgraph.config import ConfigurationError
from docgraph.content import ContentOutputter, count_lines, count_words, unescape_separator
from tests._fixtures.docs_builder import DocsBuilder


@pytest.fixture
def outputter(docs_builder: DocsBuilder) -> ContentOutputter:
    docs_builder.write(
        {
            "README.md": "# Home\n[zeta](zeta.md) [alpha](alpha.md)\n",
            "zeta.md": "# Zeta\n",
            "alpha.md": "# Alpha\nsee [beta](beta.md)\n",
            "beta.md": "# Beta\n",
        }
    )
    return ContentOutputter(docs_builder.linter().graph())


def test_dependency_order_follows_discovery(outputter: ContentOutputter) -> None:
    names = [outputter.graph.relative(path) for path in outputter.ordered("deps")]

    assert names == ["README.md", "zeta.md", "alpha.md", "beta.md"]


def test_alpha_order(outputter: ContentOutputter) -> None:
    names = [outputter.graph.relative(path) for path in outputter.ordered("alpha")]

    assert names == ["README.md", "alpha.md", "beta.md", "zeta.md"]


def test_selected_files_keep_graph_order(outputter: ContentOutputter, docs_builder: DocsBuilder) -> None:
    selected = [docs_builder.file("beta.md"), docs_builder.file("zeta.md")]

    names = [outputter.graph.relative(path) for path in outputter.ordered("deps", selected)]

    assert names == ["zeta.md", "beta.md"]


def test_unknown_files_and_orders_are_rejected(outputter: ContentOutputter, docs_builder: DocsBuilder) -> None:
    with pytest.raises(ConfigurationError, match="Invalid order"):
        outputter.ordered("random")
    with pytest.raises(ConfigurationError, match="missing.md"):
        outputter.ordered("deps", [docs_builder.file("missing.md")])


def test_render_markdown_joins_with_separator(outputter: ContentOutputter, docs_builder: DocsBuilder) -> None:
    paths = [docs_builder.file("zeta.md"), docs_builder.file("beta.md")]

    assert outputter.render_markdown(paths) == "# Zeta\n\n# Beta\n"
    assert outputter.render_markdown(paths, "\n---\n") == "# Zeta\n---\n# Beta\n"
    assert outputter.render_markdown([]) == ""


def test_render_json_includes_counts(outputter: ContentOutputter, docs_builder: DocsBuilder) -> None:
    records = outputter.render_json([docs_builder.file("alpha.md")])

    assert records == [
        {
            "file": "alpha.md",
            "depth": 1,
            "content": "# Alpha\nsee [beta](beta.md)\n",
            "wordCount": 4,
            "lineCount": 3,
        }
    ]


def test_helpers() -> None:
    assert unescape_separator("\\n---\\t") == "\n---\t"
    assert count_words("  one two\nthree ") == 3
    assert count_lines("a\nb") == 2

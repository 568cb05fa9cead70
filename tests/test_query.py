"""Tests for docgraph.query."""

from __future__ import annotations

import pytest

from docgraph.config import ConfigurationError
from docgraph.query import filter_by_frontmatter
from tests._fixtures.docs_builder import DocsBuilder


@pytest.fixture
def tagged_docs(docs_builder: DocsBuilder) -> DocsBuilder:
    docs_builder.write(
        {
            "README.md": """
            ---
            status: published
            ---
            [api](api.md) [draft](draft.md) [plain](plain.md)
            """,
            "api.md": """
            ---
            status: published
            tags: [api, reference]
            ---
            # API
            """,
            "draft.md": """
            ---
            status: draft
            tags: [api]
            ---
            # Draft
            """,
            "plain.md": "# No front-matter\n",
            "orphan.md": "---\nstatus: draft\n---\n# Orphan\n",
        }
    )
    return docs_builder


def test_filter_by_equality(tagged_docs: DocsBuilder) -> None:
    graph = tagged_docs.linter().graph()

    matched = filter_by_frontmatter(graph, "status == 'published'")

    assert matched == [tagged_docs.file("README.md"), tagged_docs.file("api.md")]


def test_filter_by_list_membership(tagged_docs: DocsBuilder) -> None:
    graph = tagged_docs.linter().graph()

    matched = filter_by_frontmatter(graph, "contains(tags, 'api')")

    assert matched == [tagged_docs.file("api.md"), tagged_docs.file("draft.md")]


def test_documents_outside_the_graph_are_loaded_on_demand(tagged_docs: DocsBuilder) -> None:
    linter = tagged_docs.linter()
    graph = linter.graph()

    matched = filter_by_frontmatter(graph, "status == 'draft'", linter.orphans(), load=linter.document)

    assert matched == [tagged_docs.file("orphan.md")]


def test_malformed_expression_is_a_configuration_error(tagged_docs: DocsBuilder) -> None:
    graph = tagged_docs.linter().graph()

    with pytest.raises(ConfigurationError, match="Invalid front-matter query"):
        filter_by_frontmatter(graph, "status ==")

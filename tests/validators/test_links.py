"""Tests for docgraph.validators.links."""

from __future__ import annotations

from typing import List, Tuple

from docgraph.models import DiagnosticKind
from docgraph.validators import LinkValidator
from tests._fixtures.docs_builder import DocsBuilder


def _check(docs_builder: DocsBuilder, **overrides) -> List[Tuple[str, int, int, str]]:
    linter = docs_builder.linter(**overrides)
    findings = LinkValidator(linter.store).validate(linter.graph())
    return [(finding.kind.value, finding.line, finding.column, finding.message) for finding in findings]


def test_dead_links_report_source_location(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": """
            # Home

            See [guide](guide.md) and [gone](missing/gone.md).
            """,
            "guide.md": "# Guide\n",
        }
    )

    assert _check(docs_builder) == [("dead-link", 3, 27, "Dead link: missing/gone.md")]


def test_dead_link_is_reported_even_when_target_pattern_is_excluded(docs_builder: DocsBuilder) -> None:
    docs_builder.write({"README.md": "[draft](drafts/ghost.md)\n"})

    assert _check(docs_builder, exclude=["drafts/"]) == [
        ("dead-link", 1, 1, "Dead link: drafts/ghost.md")
    ]


def test_anchor_checks(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": """
            # Getting Started

            [ok](guide.md#installation)
            [raw text](guide.md#Build%20&%20Test)
            [bad](guide.md#nope)
            [local](#getting-started)
            [local bad](#missing)
            [html](guide.md#custom-anchor)
            [dup](guide.md#faq-1)
            """,
            "guide.md": """
            # Installation
            ## Build & Test
            <a id="custom-anchor"></a>
            ## FAQ
            ## FAQ
            """,
        }
    )

    assert _check(docs_builder) == [
        ("dead-anchor", 5, 1, "Dead anchor: #nope in guide.md"),
        ("dead-anchor", 7, 1, "Dead anchor: #missing in README.md"),
    ]


def test_anchor_targets_beyond_depth_are_parsed_on_demand(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": "[a](a.md#a) [b](a.md#b)\n",
            "a.md": "# A\n",
        }
    )

    findings = _check(docs_builder, depth=0)

    assert findings == [("dead-anchor", 1, 13, "Dead anchor: #b in a.md")]


def test_external_and_non_document_targets_are_not_anchor_checked(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": "[web](https://example.com/#x) [code](tool.py#L10) [mail](mailto:a@b.c)\n",
            "tool.py": "print('hi')\n",
        }
    )

    assert _check(docs_builder) == []


def test_unresolvable_targets_are_dead_links(docs_builder: DocsBuilder) -> None:
    docs_builder.write({"README.md": "[empty]()\n"})

    findings = _check(docs_builder)

    assert [(kind, line) for kind, line, _, _ in findings] == [("dead-link", 1)]
    assert "empty link target" in findings[0][3]


def test_validator_checks_every_parsed_graph_document(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": "[a](a.md)\n",
            "a.md": "[gone](gone.md)\n",
        }
    )
    linter = docs_builder.linter()

    findings = LinkValidator(linter.store).validate(linter.graph())

    assert [finding.kind for finding in findings] == [DiagnosticKind.DEAD_LINK]
    assert findings[0].file == docs_builder.file("a.md")


def test_lone_hash_is_a_dead_anchor(docs_builder: DocsBuilder) -> None:
    docs_builder.write({"README.md": "# Home\n\n[top](#) and [guide](guide.md#)\n", "guide.md": "# Guide\n"})

    assert _check(docs_builder) == [("dead-anchor", 3, 1, "Dead anchor: # in README.md")]

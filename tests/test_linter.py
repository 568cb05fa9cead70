"""End-to-end tests for docgraph.linter."""

from __future__ import annotations

from typing import List, Tuple

from docgraph.diagnostics import LintReport
from docgraph.linter import DocLinter
from tests._fixtures.docs_builder import DocsBuilder


def _summary(report: LintReport) -> List[Tuple[str, str]]:
    return [(item.rule, item.file.relative_to(report.root).as_posix()) for item in report.diagnostics]


def test_clean_tree_has_no_diagnostics(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": """
            # Project

            - [Setup](docs/setup.md#setup)
            - [API](docs/api/)
            """,
            "docs/setup.md": "## Setup\n\nBack to [home](../README.md#project).\n",
            "docs/api/README.md": "# API\n",
        }
    )

    report = docs_builder.linter().lint()

    assert report.diagnostics == []
    assert report.exit_code == 0
    assert report.files_checked == 3


def test_adding_a_link_removes_an_orphan(docs_builder: DocsBuilder) -> None:
    docs_builder.write({"README.md": "# Home\n", "guide.md": "# Guide\n"})

    first = docs_builder.linter().lint()
    assert _summary(first) == [("orphan-files", "guide.md")]
    assert first.exit_code == 1

    docs_builder.write({"README.md": "# Home\n[guide](guide.md)\n"})
    second = docs_builder.linter().lint()
    assert second.diagnostics == []


def test_fragment_links_within_one_document(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": """
            # Intro
            [setup](#setup)
            [nowhere](#non-existent-section)

            ## Setup
            """,
        }
    )

    report = docs_builder.linter().lint()

    assert [(item.rule, item.line) for item in report.diagnostics] == [("dead-anchor", 3)]


def test_dead_link_into_excluded_directory(docs_builder: DocsBuilder) -> None:
    docs_builder.write({"README.md": "[ghost](drafts/ghost.md)\n", "drafts/real.md": "# Real\n"})

    report = docs_builder.linter(exclude=["drafts/"]).lint()

    assert _summary(report) == [("dead-link", "README.md")]


def test_negated_exclusion_applies_to_traversal_and_orphans(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": "[wip](drafts/wip.md)\n",
            "drafts/wip.md": "# WIP\n",
            "drafts/important.md": "# Important\n",
        }
    )
    linter = docs_builder.linter(exclude=["drafts/**", "!drafts/important.md"])

    report = linter.lint()

    assert docs_builder.file("drafts/wip.md") not in linter.graph()
    assert _summary(report) == [("orphan-files", "drafts/important.md")]


def test_multi_entrypoint_merge(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "A.md": "[c](c.md)\n",
            "B.md": "[x](x.md)\n",
            "x.md": "[c](c.md)\n",
            "c.md": "# C\n",
        }
    )
    linter = docs_builder.linter(entrypoints=["A.md", "B.md"])

    report = linter.lint()
    node = linter.graph().node(docs_builder.file("c.md"))

    assert report.diagnostics == []
    assert node.depth == 1
    assert node.incoming_count == 2


def test_depth_zero_reports_linked_files_as_orphans(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": "[a](a.md#a) [b](b.md)\n",
            "a.md": "# A\n",
            "b.md": "# B\n[gone](gone.md)\n",
        }
    )

    report = docs_builder.linter(depth=0).lint()

    # Only README links are validated, and they resolve.
    assert _summary(report) == [("orphan-files", "a.md"), ("orphan-files", "b.md")]


def test_rule_severities_from_config(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            ".docgraph.yml": """
            rules:
              orphan-files: warn
              dead-anchor: off
            """,
            "README.md": "[x](#missing)\n",
            "lonely.md": "# Lonely\n",
        }
    )

    report = docs_builder.linter().lint()

    assert [(item.rule, item.severity.value) for item in report.diagnostics] == [("orphan-files", "warn")]
    assert report.exit_code == 0


def test_unreadable_file_is_reported(docs_builder: DocsBuilder) -> None:
    docs_builder.write({"README.md": "[bad](bad.md)\n"})
    docs_builder.file("bad.md").write_bytes(b"\xff\xfe broken")

    report = docs_builder.linter().lint()

    assert _summary(report) == [("unreadable-file", "bad.md")]
    assert report.exit_code == 1


def test_linter_accepts_injected_collaborators(docs_builder: DocsBuilder) -> None:
    docs_builder.write({"README.md": "# Home\n"})
    base = docs_builder.linter()

    linter = DocLinter(base.config, exclusion=base.exclusion, store=base.store)

    assert linter.lint().diagnostics == []
    assert linter.document(docs_builder.file("README.md")).slugs == ["home"]


def test_wrapped_link_text_is_followed(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": "See the [installation\nguide](guide.md) for details.\n",
            "guide.md": "# Guide\n",
        }
    )

    report = docs_builder.linter().lint()

    assert report.diagnostics == []
    assert report.files_checked == 2


def test_prose_that_looks_like_a_definition_is_not_a_link(docs_builder: DocsBuilder) -> None:
    docs_builder.write({"README.md": "Some paragraph text\n[TODO]: tidy this section later\n"})

    report = docs_builder.linter().lint()

    assert report.diagnostics == []
    assert report.exit_code == 0


def test_out_of_scope_links_are_checked_but_not_linted(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": "[shared](../shared.md#intro) [gone](../gone.md)\n",
            "../shared.md": "# Intro\n[broken](nowhere.md)\n",
        }
    )

    report = docs_builder.linter().lint()

    assert [(item.rule, item.line, item.column) for item in report.diagnostics] == [("dead-link", 1, 30)]
    assert report.files_checked == 1

    unscoped = docs_builder.linter(scope_limit=False).lint()

    assert unscoped.files_checked == 2
    assert [item.rule for item in unscoped.diagnostics] == ["dead-link", "dead-link"]


def test_scope_root_limits_traversal_and_orphans(docs_builder: DocsBuilder) -> None:
    docs_builder.write(
        {
            "README.md": "# Home\n",
            "guide/index.md": "[setup](setup.md) [home](../README.md)\n",
            "guide/setup.md": "# Setup\n",
            "guide/extra.md": "# Extra\n",
        }
    )

    linter = docs_builder.linter(scope_root="guide", entrypoints=["guide/index.md"])
    report = linter.lint()

    assert linter.graph().files() == [docs_builder.file("guide/index.md"), docs_builder.file("guide/setup.md")]
    assert _summary(report) == [("orphan-files", "guide/extra.md")]

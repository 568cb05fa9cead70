"""Tests for docgraph.diagnostics."""

from __future__ import annotations

from pathlib import Path

from docgraph.diagnostics import EXIT_ERRORS, EXIT_OK, DiagnosticsAggregator
from docgraph.models import DiagnosticKind, Finding, Severity


def _finding(kind: DiagnosticKind, name: str, line: int | None = None, message: str = "problem") -> Finding:
    return Finding(kind=kind, file=Path("/project") / name, message=message, line=line, column=1 if line else None)


def test_findings_are_sorted_and_deduplicated() -> None:
    findings = [
        _finding(DiagnosticKind.DEAD_LINK, "b.md", 3),
        _finding(DiagnosticKind.DEAD_ANCHOR, "a.md", 9),
        _finding(DiagnosticKind.DEAD_LINK, "a.md", 2),
        _finding(DiagnosticKind.DEAD_LINK, "b.md", 3),
        _finding(DiagnosticKind.ORPHAN_FILE, "a.md"),
    ]

    diagnostics = DiagnosticsAggregator().aggregate(findings)

    assert [(item.file.name, item.line, item.rule) for item in diagnostics] == [
        ("a.md", None, "orphan-files"),
        ("a.md", 2, "dead-link"),
        ("a.md", 9, "dead-anchor"),
        ("b.md", 3, "dead-link"),
    ]
    assert all(item.severity is Severity.ERROR for item in diagnostics)


def test_severity_mapping_controls_exit_code() -> None:
    findings = [
        _finding(DiagnosticKind.ORPHAN_FILE, "lonely.md"),
        _finding(DiagnosticKind.DEAD_LINK, "README.md", 1),
    ]
    aggregator = DiagnosticsAggregator({"orphan-files": Severity.WARN, "dead-link": Severity.OFF})

    report = aggregator.report(Path("/project"), findings, files_checked=3)

    assert [item.rule for item in report.diagnostics] == ["orphan-files"]
    assert report.warning_count == 1
    assert report.error_count == 0
    assert report.exit_code == EXIT_OK

    strict = DiagnosticsAggregator().report(Path("/project"), findings)
    assert strict.error_count == 2
    assert strict.exit_code == EXIT_ERRORS


def test_report_serialises_relative_paths() -> None:
    report = DiagnosticsAggregator().report(
        Path("/project"),
        [_finding(DiagnosticKind.DEAD_ANCHOR, "docs/guide.md", 4, "Dead anchor: #x in a.md")],
        files_checked=2,
    )

    assert report.to_dict() == {
        "files": 2,
        "errors": 1,
        "warnings": 0,
        "diagnostics": [
            {
                "rule": "dead-anchor",
                "kind": "dead-anchor",
                "severity": "error",
                "file": "docs/guide.md",
                "line": 4,
                "column": 1,
                "message": "Dead anchor: #x in a.md",
            }
        ],
    }

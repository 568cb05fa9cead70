"""Severity mapping, de-duplication and exit status for findings."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from .models import Diagnostic, Finding, Severity

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_USAGE = 2


@dataclass
class LintReport:
    """Final, sorted diagnostics of one run."""

    root: Path
    diagnostics: List[Diagnostic] = field(default_factory=list)
    files_checked: int = 0

    @property
    def error_count(self) -> int:
        return sum(1 for item in self.diagnostics if item.severity is Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for item in self.diagnostics if item.severity is Severity.WARN)

    @property
    def exit_code(self) -> int:
        return EXIT_ERRORS if self.error_count else EXIT_OK

    def by_file(self) -> Dict[Path, List[Diagnostic]]:
        grouped: Dict[Path, List[Diagnostic]] = {}
        for item in self.diagnostics:
            grouped.setdefault(item.file, []).append(item)
        return grouped

    def to_dict(self) -> Dict[str, object]:
        return {
            "files": self.files_checked,
            "errors": self.error_count,
            "warnings": self.warning_count,
            "diagnostics": [item.to_dict(self.root) for item in self.diagnostics],
        }


class DiagnosticsAggregator:
    """Attaches configured severities to findings.

    Rules set to ``off`` drop their findings entirely; rules missing from
    ``rules`` default to ``error``.
    """

    def __init__(self, rules: Mapping[str, Severity] | None = None) -> None:
        self.rules: Dict[str, Severity] = dict(rules or {})

    def severity_for(self, rule: str) -> Severity:
        return self.rules.get(rule, Severity.ERROR)

    def aggregate(self, findings: Iterable[Finding]) -> List[Diagnostic]:
        unique: Dict[tuple, Diagnostic] = {}
        for finding in findings:
            diagnostic = self._to_diagnostic(finding)
            if diagnostic is None:
                continue
            key = (
                diagnostic.file,
                diagnostic.line,
                diagnostic.column,
                diagnostic.rule,
                diagnostic.message,
            )
            unique.setdefault(key, diagnostic)
        return sorted(unique.values(), key=_sort_key)

    def report(self, root: Path, findings: Iterable[Finding], *, files_checked: int = 0) -> LintReport:
        return LintReport(root=root, diagnostics=self.aggregate(findings), files_checked=files_checked)

    def _to_diagnostic(self, finding: Finding) -> Optional[Diagnostic]:
        rule = finding.kind.rule
        severity = self.severity_for(rule)
        if severity is Severity.OFF:
            return None
        return Diagnostic(
            kind=finding.kind,
            severity=severity,
            file=finding.file,
            message=finding.message,
            rule=rule,
            line=finding.line,
            column=finding.column,
        )


def _sort_key(item: Diagnostic) -> tuple:
    return (
        item.file.as_posix(),
        item.line if item.line is not None else 0,
        item.column if item.column is not None else 0,
        item.rule,
        item.message,
    )


__all__ = [
    "DiagnosticsAggregator",
    "EXIT_ERRORS",
    "EXIT_OK",
    "EXIT_USAGE",
    "LintReport",
]

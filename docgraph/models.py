"""Core data models shared across docgraph components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class Severity(str, Enum):
    """Severity attached to a rule in the configuration."""

    ERROR = "error"
    WARN = "warn"
    OFF = "off"

    @classmethod
    def parse(cls, value: str) -> "Severity":
        lowered = value.strip().lower()
        if lowered == "warning":
            lowered = "warn"
        return cls(lowered)


class DiagnosticKind(str, Enum):
    """Kinds of problems reported by the validators."""

    ORPHAN_FILE = "orphan-file"
    DEAD_LINK = "dead-link"
    DEAD_ANCHOR = "dead-anchor"
    UNREADABLE_FILE = "unreadable-file"

    @property
    def rule(self) -> str:
        """Configuration key controlling the severity of this kind."""
        return _RULE_BY_KIND[self]


_RULE_BY_KIND = {
    DiagnosticKind.ORPHAN_FILE: "orphan-files",
    DiagnosticKind.DEAD_LINK: "dead-link",
    DiagnosticKind.DEAD_ANCHOR: "dead-anchor",
    DiagnosticKind.UNREADABLE_FILE: "unreadable-file",
}

RULE_NAMES: Tuple[str, ...] = tuple(_RULE_BY_KIND.values())


@dataclass(frozen=True)
class LinkReference:
    """Outbound link found in a document."""

    source: Path
    raw: str
    line: int
    column: int
    target: Optional[Path] = None
    fragment: Optional[str] = None
    external: bool = False
    kind: str = "inline"
    error: Optional[str] = None


@dataclass(frozen=True)
class HeadingSlug:
    """Anchor slug generated for a heading."""

    slug: str
    line: int
    level: int
    text: str


@dataclass
class Document:
    """Parsed view of a single Markdown document."""

    path: Path
    content: str
    content_hash: str
    links: List[LinkReference] = field(default_factory=list)
    headings: List[HeadingSlug] = field(default_factory=list)
    anchors: List[str] = field(default_factory=list)
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def slugs(self) -> List[str]:
        return [heading.slug for heading in self.headings]

    def has_anchor(self, name: str) -> bool:
        return name in self.anchors or any(heading.slug == name for heading in self.headings)


@dataclass(frozen=True)
class Finding:
    """Problem discovered by a validator before a severity is attached."""

    kind: DiagnosticKind
    file: Path
    message: str
    line: Optional[int] = None
    column: Optional[int] = None


@dataclass(frozen=True)
class Diagnostic:
    """Reportable problem with its configured severity."""

    kind: DiagnosticKind
    severity: Severity
    file: Path
    message: str
    rule: str
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self, root: Optional[Path] = None) -> Dict[str, Any]:
        file_path = self.file
        if root is not None:
            try:
                file_path = self.file.relative_to(root)
            except ValueError:
                pass
        return {
            "rule": self.rule,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "file": file_path.as_posix(),
            "line": self.line,
            "column": self.column,
            "message": self.message,
        }

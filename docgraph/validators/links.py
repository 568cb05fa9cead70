"""Dead link and dead anchor detection over a completed graph."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from ..graph.model import DocumentGraph
from ..logging import get_logger
from ..markdown.slugs import slugify
from ..models import DiagnosticKind, Document, Finding, LinkReference
from ..scanner import DocumentStore

logger = get_logger("validators.links")


def anchor_exists(document: Document, fragment: str) -> bool:
    """Match ``fragment`` as written, then in its slugified form."""
    if document.has_anchor(fragment):
        return True
    slug = slugify(fragment)
    return bool(slug) and document.has_anchor(slug)


class LinkValidator:
    """Checks every link of every parsed graph document.

    Existence checks do not depend on graph membership or the depth bound:
    anchor targets outside the graph are parsed on demand through the store.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self.resolver = store.parser.resolver

    def validate(self, graph: DocumentGraph) -> List[Finding]:
        findings: List[Finding] = []
        for document in graph.documents():
            for link in document.links:
                finding = self.check(link)
                if finding is not None:
                    findings.append(finding)
        return findings

    def check(self, link: LinkReference) -> Optional[Finding]:
        if link.external:
            return None
        if link.error is not None or link.target is None:
            return self._finding(
                DiagnosticKind.DEAD_LINK,
                link,
                f"Dead link: {link.raw} ({link.error or 'unresolvable'})",
            )

        target = link.target
        if not target.exists():
            return self._finding(
                DiagnosticKind.DEAD_LINK, link, f"Dead link: {self._display(target)}"
            )

        if link.fragment is None or not self.resolver.is_document(target) or not target.is_file():
            return None

        document = self._load(target)
        if document is None or anchor_exists(document, link.fragment):
            return None
        return self._finding(
            DiagnosticKind.DEAD_ANCHOR,
            link,
            f"Dead anchor: #{link.fragment} in {self._display(target)}",
        )

    def _load(self, path: Path) -> Optional[Document]:
        try:
            return self.store.load(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Skipping anchor check for %s: %s", path, exc)
            return None

    def _display(self, path: Path) -> str:
        try:
            return path.relative_to(self.resolver.root).as_posix()
        except ValueError:
            return path.as_posix()

    @staticmethod
    def _finding(kind: DiagnosticKind, link: LinkReference, message: str) -> Finding:
        return Finding(kind=kind, file=link.source, message=message, line=link.line, column=link.column)


__all__ = ["LinkValidator", "anchor_exists"]

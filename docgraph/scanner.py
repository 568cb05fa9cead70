"""On-disk document discovery and the per-run document store."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from .exclusion import ExclusionFilter
from .logging import get_logger
from .markdown.parser import DocumentParser
from .models import Document
from .paths import DEFAULT_EXTENSIONS

logger = get_logger("scanner")


def iter_documents(
    root: Path,
    exclusion: ExclusionFilter | None = None,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> Iterator[Path]:
    """Yield eligible documents below ``root`` in a stable order."""
    root = Path(os.path.normpath(os.path.abspath(root)))
    suffixes = tuple(ext.lower() for ext in extensions)
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)

        if exclusion is not None:
            dirnames[:] = [
                name for name in dirnames if not exclusion.is_directory_pruned(current_dir / name)
            ]
        dirnames.sort()

        for filename in sorted(filenames):
            if not filename.lower().endswith(suffixes):
                continue
            path = current_dir / filename
            if exclusion is not None and exclusion.is_excluded(path):
                continue
            yield path


def find_documents(
    root: Path,
    exclusion: ExclusionFilter | None = None,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> List[Path]:
    documents = list(iter_documents(root, exclusion, extensions))
    logger.debug("Found %d eligible documents below %s", len(documents), root)
    return documents


class DocumentStore:
    """Parses each document at most once per run.

    ``load`` may be called from worker threads; the cache is guarded by a
    lock and the first completed parse of a path wins.
    """

    def __init__(self, parser: DocumentParser) -> None:
        self.parser = parser
        self._documents: Dict[Path, Document] = {}
        self._lock = threading.Lock()

    def load(self, path: Path) -> Document:
        """Return the parsed document, reading it from disk if needed.

        Raises :class:`OSError` or :class:`UnicodeDecodeError` when the file
        cannot be read as UTF-8 text.
        """
        path = self.parser.resolver.canonical(path)
        with self._lock:
            cached = self._documents.get(path)
        if cached is not None:
            return cached

        content = path.read_text(encoding="utf-8")
        document = self.parser.parse(path, content)
        with self._lock:
            return self._documents.setdefault(path, document)

    def get(self, path: Path) -> Optional[Document]:
        """Return the cached document without touching the filesystem."""
        with self._lock:
            return self._documents.get(self.parser.resolver.canonical(path))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return self.get(Path(path)) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)


__all__ = ["DocumentStore", "find_documents", "iter_documents"]

"""Resolution of link targets to canonical filesystem paths."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence
from urllib.parse import unquote

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_WINDOWS_DRIVE = re.compile(r"^[A-Za-z]:[\\/]")
_UNESCAPED_HASH = re.compile(r"(?<!\\)#")

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md",)
INDEX_NAMES: tuple[str, ...] = ("README.md", "index.md")


class UnresolvableLink(ValueError):
    """Raised when a link target is not syntactically a path."""


@dataclass(frozen=True)
class ResolvedTarget:
    """Outcome of resolving a raw link target."""

    path: Optional[Path]
    fragment: Optional[str]
    external: bool = False


def is_external(raw: str) -> bool:
    """Return True for links carrying a URL scheme or a network location."""
    target = raw.strip().lstrip("<")
    if target.startswith("//"):
        return True
    if _WINDOWS_DRIVE.match(target):
        return False
    return bool(_SCHEME_PATTERN.match(target))


def split_fragment(raw: str) -> tuple[str, Optional[str]]:
    """Split a target at its first unescaped ``#``."""
    match = _UNESCAPED_HASH.search(raw)
    if match is None:
        return raw, None
    return raw[: match.start()], raw[match.end() :]


class PathResolver:
    """Resolves raw link targets relative to the document containing them."""

    def __init__(
        self,
        root: Path,
        *,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        index_names: Sequence[str] = INDEX_NAMES,
    ) -> None:
        self.root = Path(os.path.normpath(os.path.abspath(root)))
        self.extensions = tuple(ext if ext.startswith(".") else f".{ext}" for ext in extensions)
        self.index_names = tuple(index_names)

    def is_document(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions

    def resolve(self, source: Path, raw: str) -> ResolvedTarget:
        """Resolve ``raw`` as written in ``source``.

        Missing files are not an error here; existence is checked by the
        link validator.
        """
        if raw is None or not raw.strip():
            raise UnresolvableLink("empty link target")
        if "\x00" in raw or "\n" in raw or "\r" in raw:
            raise UnresolvableLink(f"link target contains control characters: {raw!r}")

        target = raw.strip()
        if target.startswith("<") and target.endswith(">"):
            target = target[1:-1].strip()
        if is_external(target):
            return ResolvedTarget(path=None, fragment=None, external=True)

        path_part, fragment = split_fragment(target)
        path_part = path_part.split("?", 1)[0]
        path_part = unquote(path_part.replace("\\#", "#"))
        if fragment is not None:
            fragment = unquote(fragment)

        source = self.canonical(source)
        if not path_part:
            if fragment is None:
                raise UnresolvableLink(f"link target has neither path nor fragment: {raw!r}")
            # A lone `#` keeps an empty fragment, which no anchor matches.
            return ResolvedTarget(path=source, fragment=fragment)

        return ResolvedTarget(path=self._resolve_path(source, path_part), fragment=fragment or None)

    def canonical(self, path: Path | str) -> Path:
        """Return the absolute, normalised identity of ``path``."""
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        return Path(os.path.normpath(candidate))

    def _resolve_path(self, source: Path, path_part: str) -> Path:
        trailing_slash = path_part.endswith("/")
        if path_part.startswith("/"):
            candidate = self.root / path_part.lstrip("/")
        else:
            candidate = source.parent / path_part
        resolved = Path(os.path.normpath(candidate))

        if trailing_slash or resolved.is_dir():
            for name in self.index_names:
                index = resolved / name
                if index.is_file():
                    return index
            return resolved

        if not resolved.suffix and not resolved.exists():
            for ext in self.extensions:
                sibling = resolved.with_name(resolved.name + ext)
                if sibling.is_file():
                    return sibling
        return resolved


__all__ = [
    "DEFAULT_EXTENSIONS",
    "PathResolver",
    "ResolvedTarget",
    "UnresolvableLink",
    "is_external",
    "split_fragment",
]

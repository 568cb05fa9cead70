"""Gitignore-style exclusion rules merged from several sources."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import IGNORE_FILE_NAME, ConfigurationError, LintConfig
from .logging import get_logger

SOURCE_DEFAULTS = "defaults"
SOURCE_GITIGNORE = "gitignore"
SOURCE_IGNORE_FILE = "ignore-file"
SOURCE_CONFIG = "config"
SOURCE_CLI = "cli"

# Lowest to highest precedence.
SOURCES: Tuple[str, ...] = (
    SOURCE_DEFAULTS,
    SOURCE_GITIGNORE,
    SOURCE_IGNORE_FILE,
    SOURCE_CONFIG,
    SOURCE_CLI,
)
_TIER = {name: index for index, name in enumerate(SOURCES)}

logger = get_logger("exclusion")


@dataclass(frozen=True)
class ExclusionRule:
    """One parsed pattern together with the source it came from."""

    pattern: str
    source: str
    negate: bool
    directory_only: bool
    anchored: bool
    regex: re.Pattern

    @property
    def tier(self) -> int:
        return _TIER[self.source]

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored:
            return self.regex.fullmatch(rel_path) is not None
        name = rel_path.rsplit("/", 1)[-1]
        return self.regex.fullmatch(name) is not None


def parse_rule(raw: str, source: str) -> Optional[ExclusionRule]:
    """Parse one gitignore-style line; blank lines and comments yield None."""
    if source not in _TIER:
        raise ValueError(f"Unknown exclusion source: {source}")
    pattern = raw.rstrip("\r\n")
    if not pattern.endswith("\\ "):
        pattern = pattern.rstrip()
    pattern = pattern.lstrip()
    if not pattern or pattern.startswith("#"):
        return None

    negate = pattern.startswith("!")
    if negate:
        pattern = pattern[1:]
    elif pattern.startswith(("\\!", "\\#")):
        pattern = pattern[1:]

    body = pattern
    directory_only = body.endswith("/")
    if directory_only:
        body = body.rstrip("/")
    anchored = "/" in body
    body = body.lstrip("/")
    if not body:
        raise ConfigurationError(f"Malformed exclusion pattern from {source}: '{raw.strip()}'")

    return ExclusionRule(
        pattern=raw.strip(),
        source=source,
        negate=negate,
        directory_only=directory_only,
        anchored=anchored,
        regex=re.compile(_glob_to_regex(body, raw.strip(), source)),
    )


def _glob_to_regex(glob: str, original: str, source: str) -> str:
    parts: List[str] = []
    index = 0
    length = len(glob)
    while index < length:
        char = glob[index]
        if char == "*":
            if glob.startswith("**", index):
                at_start = index == 0 or glob[index - 1] == "/"
                after = index + 2
                if at_start and after < length and glob[after] == "/":
                    parts.append("(?:.*/)?")
                    index = after + 1
                    continue
                if at_start and after == length:
                    parts.append(".*")
                    index = after
                    continue
                parts.append("[^/]*")
                index = after
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = glob.find("]", index + 2 if glob.startswith("[]", index) else index + 1)
            if end == -1:
                raise ConfigurationError(
                    f"Malformed exclusion pattern from {source}: '{original}' (unbalanced '[')"
                )
            inner = glob[index + 1 : end]
            if inner.startswith("!"):
                inner = "^" + inner[1:]
            parts.append("[" + inner.replace("\\", "\\\\") + "]")
            index = end
        elif char == "\\" and index + 1 < length:
            index += 1
            parts.append(re.escape(glob[index]))
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


def read_ignore_file(path: Path, source: str) -> List[ExclusionRule]:
    """Parse an ignore file; a missing file contributes no rules."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("%s file not found: %s", source, path)
        return []
    except OSError as exc:
        logger.warning("Failed to read %s file %s: %s", source, path, exc)
        return []

    rules: List[ExclusionRule] = []
    for line in text.splitlines():
        rule = parse_rule(line, source)
        if rule is not None:
            rules.append(rule)
    return rules


def default_patterns(exclude_hidden: bool = True) -> List[str]:
    patterns = ["node_modules/"]
    if exclude_hidden:
        patterns.append(".*")
    return patterns


class ExclusionFilter:
    """Decides graph eligibility of paths below a project root.

    Rules are held in precedence order, so the last matching rule is the
    verdict. A path below an excluded directory stays excluded unless its
    last matching rule is a negation from a strictly higher-precedence
    source than the rule that excluded the directory.
    """

    def __init__(self, root: Path, rules: Iterable[ExclusionRule] = ()) -> None:
        self.root = Path(os.path.normpath(os.path.abspath(root)))
        self.rules: List[ExclusionRule] = sorted(rules, key=lambda rule: rule.tier)
        self._directory_cache: Dict[str, Optional[ExclusionRule]] = {}

    @classmethod
    def from_config(cls, config: LintConfig) -> "ExclusionFilter":
        root = Path(config.root)
        rules: List[ExclusionRule] = []
        rules.extend(_parse_all(default_patterns(config.exclude_hidden), SOURCE_DEFAULTS))
        if config.respect_ignore_file:
            rules.extend(read_ignore_file(root / ".gitignore", SOURCE_GITIGNORE))
        rules.extend(read_ignore_file(root / IGNORE_FILE_NAME, SOURCE_IGNORE_FILE))
        rules.extend(_parse_all(config.exclude, SOURCE_CONFIG))
        rules.extend(_parse_all(config.cli_exclude, SOURCE_CLI))

        exclusion = cls(root, rules)
        logger.debug("Exclusion filter loaded %d patterns", len(exclusion.rules))
        for source, count in exclusion.stats().items():
            logger.debug("  %s: %d", source, count)
        return exclusion

    def stats(self) -> Dict[str, int]:
        counts = {source: 0 for source in SOURCES}
        for rule in self.rules:
            counts[rule.source] += 1
        return counts

    @property
    def patterns(self) -> List[str]:
        return [rule.pattern for rule in self.rules]

    def is_excluded(self, path: Path | str, *, is_dir: bool = False) -> bool:
        rel_path = self._relative(path)
        if rel_path is None:
            return False

        parent = rel_path.rsplit("/", 1)[0] if "/" in rel_path else ""
        blocking = self._excluding_directory_rule(parent)
        verdict = self._last_match(rel_path, is_dir)

        if blocking is not None:
            return not (verdict is not None and verdict.negate and verdict.tier > blocking.tier)
        return verdict is not None and not verdict.negate

    def is_directory_pruned(self, path: Path | str) -> bool:
        """True when nothing below ``path`` can be eligible."""
        rel_path = self._relative(path)
        if not rel_path:
            return False
        blocking = self._excluding_directory_rule(rel_path)
        if blocking is None:
            return False
        return not any(rule.negate and rule.tier > blocking.tier for rule in self.rules)

    def _excluding_directory_rule(self, rel_dir: str) -> Optional[ExclusionRule]:
        """Return the rule excluding ``rel_dir`` or its nearest excluded ancestor."""
        if not rel_dir:
            return None
        if rel_dir in self._directory_cache:
            return self._directory_cache[rel_dir]

        parent = rel_dir.rsplit("/", 1)[0] if "/" in rel_dir else ""
        result = self._excluding_directory_rule(parent)
        if result is None:
            verdict = self._last_match(rel_dir, True)
            if verdict is not None and not verdict.negate:
                result = verdict
        self._directory_cache[rel_dir] = result
        return result

    def _last_match(self, rel_path: str, is_dir: bool) -> Optional[ExclusionRule]:
        found: Optional[ExclusionRule] = None
        for rule in self.rules:
            if rule.matches(rel_path, is_dir):
                found = rule
        return found

    def _relative(self, path: Path | str) -> Optional[str]:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        relative = os.path.relpath(os.path.normpath(candidate), self.root)
        if relative == ".":
            return ""
        if relative == ".." or relative.startswith(".." + os.sep):
            return None
        return Path(relative).as_posix()


def _parse_all(patterns: Sequence[str], source: str) -> List[ExclusionRule]:
    rules: List[ExclusionRule] = []
    for pattern in patterns:
        rule = parse_rule(pattern, source)
        if rule is not None:
            rules.append(rule)
    return rules


__all__ = [
    "ExclusionFilter",
    "ExclusionRule",
    "SOURCES",
    "default_patterns",
    "parse_rule",
    "read_ignore_file",
]

"""Configuration loading for docgraph (.docgraph.yml)."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .models import RULE_NAMES, Severity

PROJECT_CONFIG_NAME = ".docgraph.yml"
IGNORE_FILE_NAME = ".docgraphignore"
UNLIMITED = "unlimited"


class ConfigurationError(RuntimeError):
    """Raised for invalid configuration, entrypoints or arguments."""


def default_rules() -> Dict[str, Severity]:
    return {name: Severity.ERROR for name in RULE_NAMES}


@dataclass
class LintConfig:
    """Effective settings for one docgraph run."""

    root: Path
    entrypoints: List[str] = field(default_factory=lambda: ["README.md"])
    rules: Dict[str, Severity] = field(default_factory=default_rules)
    depth: Optional[int] = None
    exclude: List[str] = field(default_factory=list)
    cli_exclude: List[str] = field(default_factory=list)
    respect_ignore_file: bool = False
    exclude_hidden: bool = True
    extensions: List[str] = field(default_factory=lambda: [".md"])
    max_concurrency: int = 10
    scope_limit: bool = True
    scope_root: Optional[str] = None

    @property
    def max_depth(self) -> float:
        return math.inf if self.depth is None else self.depth

    @property
    def scope_path(self) -> Optional[Path]:
        """Directory traversal stays inside, or None when scoping is off."""
        if not self.scope_limit:
            return None
        if self.scope_root is None:
            return self.root
        return Path(os.path.normpath(self.root / Path(self.scope_root).expanduser()))

    def severity(self, rule: str) -> Severity:
        return self.rules.get(rule, Severity.ERROR)


def load_config(
    root: Path,
    *,
    config_path: Path | None = None,
    user_config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> LintConfig:
    """Merge defaults < user config < project config < CLI overrides."""
    root = Path(root).expanduser().resolve()
    config = LintConfig(root=root)

    user_file = user_config_path if user_config_path is not None else default_user_config_path()
    if user_file.is_file():
        config = _apply(config, _read_config(user_file), source=str(user_file))

    if config_path is not None:
        project_file = Path(config_path).expanduser()
        if not project_file.is_file():
            raise ConfigurationError(f"Config file not found: {config_path}")
    else:
        project_file = root / PROJECT_CONFIG_NAME
    if project_file.is_file():
        config = _apply(config, _read_config(project_file), source=str(project_file))

    if overrides:
        config = _apply(config, dict(overrides), source="command line")
    return config


def default_user_config_path() -> Path:
    return Path.home() / ".config" / "docgraph" / "config.yml"


def parse_depth(value: Any) -> Optional[int]:
    """Return a non-negative depth, or None for an unbounded traversal."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid depth value: {value!r}")
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {UNLIMITED, "infinity", "inf"}:
            return None
        try:
            value = int(lowered)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid depth value: '{value}' (must be a non-negative integer or '{UNLIMITED}')"
            ) from exc
    if not isinstance(value, int) or value < 0:
        raise ConfigurationError(
            f"Invalid depth value: '{value}' (must be a non-negative integer or '{UNLIMITED}')"
        )
    return value


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"{path.name} must contain a mapping at the root")
    return loaded


def _apply(config: LintConfig, data: Dict[str, Any], *, source: str) -> LintConfig:
    changes: Dict[str, Any] = {}

    entrypoints = _first_present(data, "entrypoints", "entrypoint")
    if entrypoints is not None:
        values = _as_str_list(entrypoints)
        if not values:
            raise ConfigurationError(f"{source}: at least one entrypoint is required")
        changes["entrypoints"] = values

    if "depth" in data:
        changes["depth"] = parse_depth(data["depth"])

    rules_data = data.get("rules")
    if rules_data is not None:
        if not isinstance(rules_data, dict):
            raise ConfigurationError(f"{source}: 'rules' must be a mapping")
        rules = dict(config.rules)
        for name, value in rules_data.items():
            rules[str(name)] = _as_severity(value, rule=str(name), source=source)
        changes["rules"] = rules

    if "exclude" in data:
        changes["exclude"] = _as_str_list(data.get("exclude"))
    if "cli_exclude" in data:
        changes["cli_exclude"] = _as_str_list(data.get("cli_exclude"))

    respect = _first_present(data, "respect_ignore_file", "respectIgnoreFile", "respectGitignore")
    if respect is not None:
        changes["respect_ignore_file"] = _require_bool(respect, "respect_ignore_file", source)

    hidden = _first_present(data, "exclude_hidden", "excludeHidden")
    if hidden is not None:
        changes["exclude_hidden"] = _require_bool(hidden, "exclude_hidden", source)

    if "extensions" in data:
        extensions = [ext if ext.startswith(".") else f".{ext}" for ext in _as_str_list(data["extensions"])]
        if not extensions:
            raise ConfigurationError(f"{source}: 'extensions' must not be empty")
        changes["extensions"] = extensions

    concurrency = _first_present(data, "max_concurrency", "maxConcurrency")
    if concurrency is not None:
        value = _as_int(concurrency)
        if value is None or not 1 <= value <= 100:
            raise ConfigurationError(f"{source}: 'max_concurrency' must be an integer between 1 and 100")
        changes["max_concurrency"] = value

    scope_limit = _first_present(data, "scope_limit", "scopeLimit")
    if scope_limit is not None:
        changes["scope_limit"] = _require_bool(scope_limit, "scope_limit", source)

    scope_root = _first_present(data, "scope_root", "scopeRoot")
    if scope_root is not None:
        if not isinstance(scope_root, str) or not scope_root.strip():
            raise ConfigurationError(f"{source}: 'scope_root' must be a directory path")
        changes["scope_root"] = scope_root.strip()

    return replace(config, **changes)


def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _as_severity(value: Any, *, rule: str, source: str) -> Severity:
    # YAML 1.1 reads a bare `off` as false.
    if value is False:
        return Severity.OFF
    if isinstance(value, str):
        try:
            return Severity.parse(value)
        except ValueError:
            pass
    raise ConfigurationError(
        f"{source}: invalid severity {value!r} for rule '{rule}' (expected error, warn or off)"
    )


def _require_bool(value: Any, key: str, source: str) -> bool:
    result = _as_bool(value)
    if result is None:
        raise ConfigurationError(f"{source}: '{key}' must be a boolean")
    return result


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item).strip()]
    return []


__all__ = [
    "ConfigurationError",
    "IGNORE_FILE_NAME",
    "LintConfig",
    "PROJECT_CONFIG_NAME",
    "UNLIMITED",
    "load_config",
    "parse_depth",
]

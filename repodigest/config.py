"""Configuration loading for repodigest (.repodigest.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".repodigest.yml"

DEFAULT_IGNORED_FRAGMENTS: tuple[str, ...] = (
    "node_modules/",
    ".git/",
    "dist/",
    "build/",
    ".DS_Store",
    ".idea/",
    ".vscode/",
    "coverage/",
    "__pycache__/",
    ".pytest_cache/",
    ".next/",
)


def _default_workers() -> int:
    return min(8, os.cpu_count() or 1)


@dataclass
class IgnoreConfig:
    """Path fragments and gitignore handling for the ignore filter."""

    fragments: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORED_FRAGMENTS))
    use_gitignore: bool = True


@dataclass
class LimitsConfig:
    """Ceilings applied to archives and individual files."""

    max_file_bytes: int = 1024 * 1024
    max_archive_entries: int = 50_000
    max_archive_bytes: int = 512 * 1024 * 1024


@dataclass
class DigestSettings:
    """Bounds for digest generation and rendering."""

    top_n: int = 5
    max_tree_lines: int = 400
    max_readme_chars: int = 8000


@dataclass
class ResolverConfig:
    """Import resolution knobs."""

    alias_markers: List[str] = field(default_factory=lambda: ["@"])


@dataclass
class DigestConfig:
    """Represents the settings defined in .repodigest.yml."""

    ignore: IgnoreConfig = field(default_factory=IgnoreConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    digest: DigestSettings = field(default_factory=DigestSettings)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    workers: int = field(default_factory=_default_workers)
    source: Optional[Path] = None


def load_config(config_path: Path | str | None = None) -> DigestConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    if config_path is None:
        return DigestConfig()

    config_file = _resolve_config_path(Path(config_path))
    if not config_file.exists():
        return DigestConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    config = DigestConfig(source=config_file)

    ignore_data = _as_dict(data.get("ignore"))
    if ignore_data:
        if "fragments" in ignore_data:
            config.ignore.fragments = _as_str_list(ignore_data.get("fragments"))
        config.ignore.fragments.extend(_as_str_list(ignore_data.get("extra_fragments")))
        use_gitignore = _as_bool(ignore_data.get("use_gitignore"))
        if use_gitignore is not None:
            config.ignore.use_gitignore = use_gitignore

    limits_data = _as_dict(data.get("limits"))
    if limits_data:
        config.limits.max_file_bytes = _positive_int(
            limits_data.get("max_file_bytes"), config.limits.max_file_bytes, "limits.max_file_bytes"
        )
        config.limits.max_archive_entries = _positive_int(
            limits_data.get("max_archive_entries"),
            config.limits.max_archive_entries,
            "limits.max_archive_entries",
        )
        config.limits.max_archive_bytes = _positive_int(
            limits_data.get("max_archive_bytes"),
            config.limits.max_archive_bytes,
            "limits.max_archive_bytes",
        )

    digest_data = _as_dict(data.get("digest"))
    if digest_data:
        config.digest.top_n = _positive_int(digest_data.get("top_n"), config.digest.top_n, "digest.top_n")
        config.digest.max_tree_lines = _positive_int(
            digest_data.get("max_tree_lines"), config.digest.max_tree_lines, "digest.max_tree_lines"
        )
        config.digest.max_readme_chars = _positive_int(
            digest_data.get("max_readme_chars"),
            config.digest.max_readme_chars,
            "digest.max_readme_chars",
        )

    resolver_data = _as_dict(data.get("resolver"))
    if resolver_data and "alias_markers" in resolver_data:
        config.resolver.alias_markers = _as_str_list(resolver_data.get("alias_markers"))

    config.workers = _positive_int(data.get("workers"), config.workers, "workers")
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _positive_int(value: Any, default: int, key: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a positive integer")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as exc:
            raise ConfigError(f"{key} must be a positive integer") from exc
    if not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{key} must be a positive integer")
    return value


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
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_IGNORED_FRAGMENTS",
    "ConfigError",
    "DigestConfig",
    "DigestSettings",
    "IgnoreConfig",
    "LimitsConfig",
    "ResolverConfig",
    "load_config",
]

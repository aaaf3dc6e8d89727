"""Path admission rules applied before any analysis."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Iterable, List, Optional, Sequence

from .config import DEFAULT_IGNORED_FRAGMENTS
from .models import FileMap


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from a .gitignore file."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def parse_gitignore(text: str) -> List[IgnoreRule]:
    """Parse .gitignore content into ordered rules."""
    rules: List[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def archive_root(paths: Iterable[str]) -> str:
    """Return the single top-level folder shared by every path, or ``""``."""
    root: Optional[str] = None
    for path in paths:
        if "/" not in path:
            return ""
        head = path.split("/", 1)[0]
        if root is None:
            root = head
        elif head != root:
            return ""
    return root or ""


class IgnoreFilter:
    """Decides whether an archive path participates in analysis."""

    def __init__(
        self,
        fragments: Sequence[str] = DEFAULT_IGNORED_FRAGMENTS,
        rules: Sequence[IgnoreRule] = (),
        *,
        root: str = "",
    ) -> None:
        self._fragments = tuple(f"/{fragment.lstrip('/')}" for fragment in fragments if fragment)
        self._rules = list(rules)
        self._root = root

    @classmethod
    def from_file_map(
        cls,
        file_map: FileMap,
        fragments: Sequence[str] = DEFAULT_IGNORED_FRAGMENTS,
        *,
        use_gitignore: bool = True,
    ) -> "IgnoreFilter":
        """Build a filter, honoring the archive's root .gitignore when requested."""
        root = archive_root(file_map)
        rules: List[IgnoreRule] = []
        if use_gitignore:
            gitignore_path = f"{root}/.gitignore" if root else ".gitignore"
            content = file_map.get(gitignore_path)
            if content is not None:
                rules = parse_gitignore(content.decode("utf-8", errors="ignore"))
        return cls(fragments, rules, root=root)

    def is_ignored(self, path: str) -> bool:
        anchored = f"/{path}"
        if any(fragment in anchored for fragment in self._fragments):
            return True
        if not self._rules:
            return False

        relative = path
        if self._root and path.startswith(f"{self._root}/"):
            relative = path[len(self._root) + 1 :]
        parts = relative.split("/")
        for index in range(1, len(parts)):
            if _should_ignore("/".join(parts[:index]), True, self._rules):
                return True
        return _should_ignore(relative, False, self._rules)

    def filter_paths(self, paths: Iterable[str]) -> List[str]:
        """Return admitted paths in sorted order."""
        return sorted(path for path in paths if not self.is_ignored(path))


__all__ = ["IgnoreFilter", "IgnoreRule", "archive_root", "build_ignore_rule", "parse_gitignore"]

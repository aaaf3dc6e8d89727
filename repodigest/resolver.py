"""Resolution of raw import specifiers to archive paths."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple

from .languages import JS_FAMILY, PYTHON_FAMILY, classify

DEFAULT_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx", ".json", ".mjs", ".cjs")


def normalize_path(path: str) -> str:
    """Collapse ``.``/``..``/empty segments of a POSIX path."""
    result: List[str] = []
    for part in path.split("/"):
        if part == "..":
            if result:
                result.pop()
        elif part not in {".", ""}:
            result.append(part)
    return "/".join(result)


def _dirname(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


def _join(directory: str, relative: str) -> str:
    return f"{directory}/{relative}" if directory else relative


class ImportResolver:
    """Maps ``(specifier, importer)`` pairs to at most one known path.

    Relative and Python module specifiers are resolved by direct lookup.
    Alias specifiers use a substring-containment heuristic: the first
    candidate in sorted path order wins, which may pick the wrong file when
    several paths share the same tail.
    """

    def __init__(
        self,
        paths: Iterable[str],
        *,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        alias_markers: Sequence[str] = ("@",),
    ) -> None:
        ordered = sorted(set(paths))
        self._paths = frozenset(ordered)
        self._code_paths: Tuple[str, ...] = tuple(path for path in ordered if classify(path) is not None)
        self._extensions = tuple(extensions)
        self._alias_markers = tuple(marker for marker in alias_markers if marker)
        self._cached = lru_cache(maxsize=None)(self._resolve)

    def __contains__(self, path: str) -> bool:
        return path in self._paths

    def resolve(self, specifier: str, importer: str) -> Optional[str]:
        """Return the resolved path or None when the import is external/unknown."""
        spec = classify(importer)
        family = spec.family if spec is not None else JS_FAMILY
        return self._cached(specifier, _dirname(importer), family)

    def _resolve(self, specifier: str, directory: str, family: str) -> Optional[str]:
        if not specifier:
            return None
        if family == PYTHON_FAMILY:
            return self._resolve_python(specifier, directory)
        if specifier in {".", ".."} or specifier.startswith(("./", "../")):
            return self._resolve_relative(specifier, directory)
        if any(specifier.startswith(marker) for marker in self._alias_markers):
            return self._resolve_alias(specifier)
        return None

    def _resolve_relative(self, specifier: str, directory: str) -> Optional[str]:
        target = normalize_path(_join(directory, specifier))
        if target in self._paths:
            return target
        for extension in self._extensions:
            candidate = f"{target}{extension}"
            if candidate in self._paths:
                return candidate
        index_base = f"{target}/index" if target else "index"
        for extension in self._extensions:
            candidate = f"{index_base}{extension}"
            if candidate in self._paths:
                return candidate
        return None

    def _resolve_alias(self, specifier: str) -> Optional[str]:
        parts = specifier.split("/")
        tail = "/".join(part for part in parts[1:] if part)
        if not tail:
            return None
        for path in self._code_paths:
            if tail in path:
                return path
        return None

    def _resolve_python(self, specifier: str, directory: str) -> Optional[str]:
        stripped = specifier.lstrip(".")
        dots = len(specifier) - len(stripped)
        relative = stripped.replace(".", "/")

        if dots:
            base = directory
            for _ in range(dots - 1):
                base = _dirname(base)
            if not relative:
                return self._first_existing([_join(base, "__init__.py")])
            return self._first_existing(self._python_candidates(base, relative))

        # Absolute module names: try the importer's directory, then each ancestor.
        current: Optional[str] = directory
        while current is not None:
            found = self._first_existing(self._python_candidates(current, relative))
            if found is not None:
                return found
            current = _dirname(current) if current else None
        return None

    @staticmethod
    def _python_candidates(base: str, relative: str) -> List[str]:
        return [_join(base, f"{relative}.py"), _join(base, f"{relative}/__init__.py")]

    def _first_existing(self, candidates: Iterable[str]) -> Optional[str]:
        for candidate in candidates:
            if candidate in self._paths:
                return candidate
        return None


__all__ = ["DEFAULT_EXTENSIONS", "ImportResolver", "normalize_path"]

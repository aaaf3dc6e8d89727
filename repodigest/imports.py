"""Per-language extraction of raw import specifiers."""

from __future__ import annotations

import re
from typing import List, Sequence, Tuple

from .languages import JS_FAMILY, PYTHON_FAMILY, LanguageSpec

_JS_PATTERNS: Tuple[re.Pattern[str], ...] = (
    # import x from './a'; import { a, b } from './a'; import type T from './a'
    re.compile(r"\bimport\s+(?:type\s+)?[^'\";]*?\bfrom\s*(['\"])(?P<spec>[^'\"\n]+)\1"),
    # export { a } from './a'; export * from './a'
    re.compile(r"\bexport\s+(?:type\s+)?[^'\";]*?\bfrom\s*(['\"])(?P<spec>[^'\"\n]+)\1"),
    # import './side-effect'
    re.compile(r"\bimport\s*(['\"])(?P<spec>[^'\"\n]+)\1"),
    # import('./lazy')
    re.compile(r"\bimport\s*\(\s*(['\"])(?P<spec>[^'\"\n]+)\1\s*\)"),
    # require('./a')
    re.compile(r"\brequire\s*\(\s*(['\"])(?P<spec>[^'\"\n]+)\1\s*\)"),
)

_PY_FROM = re.compile(
    r"^[ \t]*from[ \t]+(?P<module>\.+[\w.]*|[A-Za-z_][\w.]*)[ \t]+import[ \t]+"
    r"(?P<names>\([^)]*\)|[^\n#;]+)",
    re.MULTILINE,
)
_PY_IMPORT = re.compile(r"^[ \t]*import[ \t]+(?P<names>[^\n#;]+)", re.MULTILINE)
_PY_NAME = re.compile(r"^[A-Za-z_][\w.]*$")


def extract_imports(
    text: str,
    spec: LanguageSpec,
    *,
    alias_markers: Sequence[str] = ("@",),
) -> List[str]:
    """Return raw import specifiers in source order, without duplicates."""
    if spec.family == JS_FAMILY:
        found = _extract_js(text, alias_markers)
    elif spec.family == PYTHON_FAMILY:
        found = _extract_python(text)
    else:
        return []

    seen = set()
    ordered: List[str] = []
    for _, specifier in sorted(found, key=lambda item: item[0]):
        if specifier not in seen:
            seen.add(specifier)
            ordered.append(specifier)
    return ordered


def is_local_js_specifier(specifier: str, alias_markers: Sequence[str] = ("@",)) -> bool:
    """True for relative or alias-style specifiers; bare packages are external."""
    if specifier.startswith("."):
        return True
    return any(marker and specifier.startswith(marker) for marker in alias_markers)


def _extract_js(text: str, alias_markers: Sequence[str]) -> List[Tuple[int, str]]:
    found: List[Tuple[int, str]] = []
    for pattern in _JS_PATTERNS:
        for match in pattern.finditer(text):
            specifier = match.group("spec").strip()
            if is_local_js_specifier(specifier, alias_markers):
                found.append((match.start("spec"), specifier))
    return found


def _extract_python(text: str) -> List[Tuple[int, str]]:
    found: List[Tuple[int, str]] = []
    for match in _PY_FROM.finditer(text):
        module = match.group("module")
        position = match.start("module")
        if module.strip("."):
            found.append((position, module))
            continue
        # ``from . import a, b`` names sibling modules directly.
        for name in _split_names(match.group("names")):
            found.append((position, f"{module}{name}"))
    for match in _PY_IMPORT.finditer(text):
        position = match.start("names")
        for name in _split_names(match.group("names")):
            found.append((position, name))
    return found


def _split_names(raw: str) -> List[str]:
    names: List[str] = []
    cleaned = raw.strip().strip("()").replace("\\", " ")
    for part in cleaned.split(","):
        token = part.strip().split()
        if not token:
            continue
        name = token[0]
        if _PY_NAME.match(name):
            names.append(name)
    return names


__all__ = ["extract_imports", "is_local_js_specifier"]

"""Extension to language classification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LanguageSpec:
    """Language tag plus the extraction strategy family it uses."""

    tag: str
    family: str  # "js", "python" or "other"


JS_FAMILY = "js"
PYTHON_FAMILY = "python"
OTHER_FAMILY = "other"

_LANGUAGE_BY_SUFFIX = {
    ".ts": LanguageSpec("TypeScript", JS_FAMILY),
    ".tsx": LanguageSpec("TypeScript", JS_FAMILY),
    ".js": LanguageSpec("JavaScript", JS_FAMILY),
    ".jsx": LanguageSpec("JavaScript", JS_FAMILY),
    ".mjs": LanguageSpec("JavaScript", JS_FAMILY),
    ".cjs": LanguageSpec("JavaScript", JS_FAMILY),
    ".py": LanguageSpec("Python", PYTHON_FAMILY),
    ".java": LanguageSpec("Java", OTHER_FAMILY),
    ".rb": LanguageSpec("Ruby", OTHER_FAMILY),
    ".go": LanguageSpec("Go", OTHER_FAMILY),
    ".php": LanguageSpec("PHP", OTHER_FAMILY),
    ".cs": LanguageSpec("C#", OTHER_FAMILY),
    ".c": LanguageSpec("C", OTHER_FAMILY),
    ".h": LanguageSpec("C", OTHER_FAMILY),
    ".cpp": LanguageSpec("C++", OTHER_FAMILY),
    ".swift": LanguageSpec("Swift", OTHER_FAMILY),
    ".rs": LanguageSpec("Rust", OTHER_FAMILY),
    ".scala": LanguageSpec("Scala", OTHER_FAMILY),
    ".kt": LanguageSpec("Kotlin", OTHER_FAMILY),
}


def _suffix(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot <= 0:
        return ""
    return name[dot:].lower()


def classify(path: str) -> Optional[LanguageSpec]:
    """Return the language spec for a path, or None for unrecognized extensions."""
    return _LANGUAGE_BY_SUFFIX.get(_suffix(path))


def module_name(path: str) -> str:
    """Display name for a module: the file name up to its first dot."""
    name = path.rsplit("/", 1)[-1]
    return name.split(".", 1)[0] or name


__all__ = [
    "JS_FAMILY",
    "LanguageSpec",
    "OTHER_FAMILY",
    "PYTHON_FAMILY",
    "classify",
    "module_name",
]

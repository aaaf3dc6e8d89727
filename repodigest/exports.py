"""Cataloging of top-level exported symbols."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from .languages import JS_FAMILY, PYTHON_FAMILY, LanguageSpec, module_name
from .models import ExportedSymbol, Library

_JS_DECLARATION = re.compile(
    r"\bexport\s+(?P<default>default\s+)?(?:declare\s+)?(?:async\s+)?"
    r"(?P<kw>const\s+enum|const|let|var|function|abstract\s+class|class|interface|type|enum)\b"
    r"\s*\*?\s*(?P<name>[A-Za-z_$][\w$]*)?"
)
_JS_DEFAULT_IDENTIFIER = re.compile(
    r"\bexport\s+default\s+(?!async\b|function\b|class\b|abstract\b|declare\b)(?P<name>[A-Za-z_$][\w$]*)\s*;?[ \t]*$",
    re.MULTILINE,
)
_JS_EXPORT_LIST = re.compile(r"\bexport\s+(?:type\s+)?\{(?P<names>[^}]*)\}")
_CJS_NAMED = re.compile(r"\b(?:module\.)?exports\.(?P<name>[A-Za-z_$][\w$]*)\s*=(?!=)")
_CJS_DEFAULT = re.compile(r"\bmodule\.exports\s*=(?!=)\s*(?P<target>[^;\n]*)")
_JS_CLASS = re.compile(r"\bclass\s+(?P<name>[A-Za-z_$][\w$]*)")
_JS_FUNCTION = re.compile(r"\bfunction\s*\*?\s*(?P<name>[A-Za-z_$][\w$]*)")

_PY_CLASS = re.compile(r"^class\s+(?P<name>\w+)\s*[(:]", re.MULTILINE)
_PY_FUNCTION = re.compile(r"^(?:async\s+)?def\s+(?P<name>\w+)\s*\(", re.MULTILINE)
_PY_CONSTANT = re.compile(r"^(?P<name>[A-Z][A-Z0-9_]*)\s*(?::[^=\n]+)?=(?!=)", re.MULTILINE)
_PY_ALL = re.compile(r"^__all__\s*(?::[^=\n]+)?=\s*[\[(](?P<body>[^\])]*)[\])]", re.MULTILINE)
_PY_QUOTED = re.compile(r"(['\"])(?P<name>\w+)\1")

_KIND_BY_KEYWORD = {
    "const": "constant",
    "let": "constant",
    "var": "constant",
    "function": "function",
    "class": "class",
    "interface": "interface",
    "type": "other",
    "enum": "other",
}


def extract_exports(path: str, text: str, spec: LanguageSpec) -> Optional[Library]:
    """Return the file's exported symbols as a Library, or None when there are none."""
    if spec.family == JS_FAMILY:
        found = _extract_js(text)
    elif spec.family == PYTHON_FAMILY:
        found = _extract_python(text)
    else:
        return None

    library_name = module_name(path)
    seen: set[str] = set()
    exports: List[ExportedSymbol] = []
    for _, name, kind in sorted(found, key=lambda item: item[0]):
        if name in seen:
            continue
        seen.add(name)
        exports.append(ExportedSymbol(name=name, kind=kind, library=library_name))

    if not exports:
        return None
    return Library(name=library_name, file=path, exports=tuple(exports))


def _keyword_kind(keyword: str) -> str:
    normalised = keyword.split()[-1]
    return _KIND_BY_KEYWORD.get(normalised, "other")


def _extract_js(text: str) -> List[Tuple[int, str, str]]:
    found: List[Tuple[int, str, str]] = []

    for match in _JS_DECLARATION.finditer(text):
        name = match.group("name")
        if name in {"extends", "implements"}:
            name = None
        if not name:
            if not match.group("default"):
                continue
            name = "default"
        found.append((match.start(), name, _keyword_kind(match.group("kw"))))

    for match in _JS_DEFAULT_IDENTIFIER.finditer(text):
        found.append((match.start(), match.group("name"), "other"))

    for match in _JS_EXPORT_LIST.finditer(text):
        for entry in match.group("names").split(","):
            tokens = entry.split()
            if not tokens:
                continue
            name = tokens[-1] if len(tokens) >= 3 and tokens[-2] == "as" else tokens[0]
            if name == "type" and len(tokens) > 1:
                name = tokens[1]
            if re.match(r"^[A-Za-z_$][\w$]*$", name):
                found.append((match.start(), name, "other"))

    for match in _CJS_NAMED.finditer(text):
        found.append((match.start(), match.group("name"), "other"))

    for match in _CJS_DEFAULT.finditer(text):
        resolved = _commonjs_default(text, match.group("target").strip())
        if resolved is not None:
            found.append((match.start(), resolved[0], resolved[1]))

    return found


def _commonjs_default(text: str, target: str) -> Optional[Tuple[str, str]]:
    class_match = _JS_CLASS.match(target)
    if class_match:
        return class_match.group("name"), "class"
    function_match = _JS_FUNCTION.match(target)
    if function_match:
        return function_match.group("name"), "function"

    identifier = re.match(r"^(?P<name>[A-Za-z_$][\w$]*)\s*;?$", target)
    if identifier:
        name = identifier.group("name")
        if re.search(rf"\bclass\s+{re.escape(name)}\b", text):
            return name, "class"
        if re.search(rf"\bfunction\s*\*?\s*{re.escape(name)}\b", text):
            return name, "function"
        return name, "other"
    return None


def _extract_python(text: str) -> List[Tuple[int, str, str]]:
    found: List[Tuple[int, str, str]] = []
    for match in _PY_CLASS.finditer(text):
        found.append((match.start(), match.group("name"), "class"))
    for match in _PY_FUNCTION.finditer(text):
        found.append((match.start(), match.group("name"), "function"))
    for match in _PY_CONSTANT.finditer(text):
        found.append((match.start(), match.group("name"), "constant"))

    public = [item for item in found if not item[1].startswith("_")]

    declared = _PY_ALL.search(text)
    if declared is None:
        return public

    names = [match.group("name") for match in _PY_QUOTED.finditer(declared.group("body"))]
    by_name: Dict[str, Tuple[int, str, str]] = {}
    for item in found:
        by_name.setdefault(item[1], item)
    restricted: List[Tuple[int, str, str]] = []
    for offset, name in enumerate(names):
        if name in by_name:
            restricted.append(by_name[name])
        else:
            # Re-exported from another module; position it after local definitions.
            restricted.append((len(text) + offset, name, "other"))
    return restricted


__all__ = ["extract_exports"]

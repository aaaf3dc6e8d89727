"""Built-in endpoint detectors."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from ..languages import JS_FAMILY, PYTHON_FAMILY, LanguageSpec
from ..models import Endpoint
from .core import ANY_METHOD, HTTP_METHODS, line_of

# ---------------------------------------------------------------------------
# Express detector
# ---------------------------------------------------------------------------

_EXPRESS_PATTERN = re.compile(
    r"\b(?:app|router)\.(?P<verb>get|post|put|delete|patch|options|head|all)\s*\(\s*(['\"`])(?P<path>[^'\"`]+)\2",
    re.IGNORECASE,
)


class ExpressDetector:
    """Detect Express-style router verb invocations."""

    name = "Express"

    def supports(self, path: str, spec: LanguageSpec) -> bool:
        return spec.family == JS_FAMILY

    def extract(self, path: str, text: str, spec: LanguageSpec) -> Iterable[Endpoint]:
        for match in _EXPRESS_PATTERN.finditer(text):
            yield Endpoint(
                path=match.group("path"),
                method=match.group("verb"),
                file=path,
                framework=self.name,
                line=line_of(text, match.start()),
            )


# ---------------------------------------------------------------------------
# File-based routing detector (Next.js style api/ directories)
# ---------------------------------------------------------------------------

_ROUTE_DIRECTORY = "api"
_SOURCE_SUFFIX = re.compile(r"\.(?:js|jsx|ts|tsx|mjs|cjs)$")
_CATCH_ALL_SEGMENT = re.compile(r"\[\[?\.\.\.([^\]]+)\]\]?")
_DYNAMIC_SEGMENT = re.compile(r"\[([^\]]+)\]")
_METHOD_EXPORT = re.compile(
    r"\bexport\s+(?:async\s+)?function\s+(?P<fn>\w+)"
    r"|\bexport\s+(?:const|let|var)\s+(?P<const>\w+)\s*="
)
_HANDLER_EXPORT = re.compile(
    r"\bexport\s+default\b|\bmodule\.exports\s*=|\bexport\s+(?:async\s+)?function\s+handler\b"
)


def file_route_path(path: str) -> Optional[str]:
    """Derive a route template from a file's location under an ``api`` directory."""
    parts = path.split("/")
    try:
        start = parts.index(_ROUTE_DIRECTORY)
    except ValueError:
        return None

    segments: List[str] = []
    for raw in parts[start:]:
        segment = _SOURCE_SUFFIX.sub("", raw)
        # Route groups such as (admin) do not contribute to the URL.
        if segment.startswith("(") and segment.endswith(")"):
            continue
        segment = _CATCH_ALL_SEGMENT.sub(r":\1*", segment)
        segment = _DYNAMIC_SEGMENT.sub(r":\1", segment)
        segments.append(segment)

    if len(segments) > 1 and segments[-1] in {"index", "route"}:
        segments.pop()
    return "/" + "/".join(segments)


class FileRouteDetector:
    """Derive endpoints from file-based routing conventions.

    One endpoint is emitted per exported HTTP-verb handler. Route modules
    without a verb-named export are recorded once with method ``ANY``.
    """

    name = "FileRoute"

    def supports(self, path: str, spec: LanguageSpec) -> bool:
        return spec.family == JS_FAMILY and _ROUTE_DIRECTORY in path.split("/")[:-1]

    def extract(self, path: str, text: str, spec: LanguageSpec) -> Iterable[Endpoint]:
        route = file_route_path(path)
        if route is None:
            return []

        methods: List[str] = []
        first_line: dict[str, int] = {}
        for match in _METHOD_EXPORT.finditer(text):
            name = match.group("fn") or match.group("const") or ""
            if name in HTTP_METHODS and name not in first_line:
                methods.append(name)
                first_line[name] = line_of(text, match.start())

        if methods:
            return [
                Endpoint(path=route, method=method, file=path, framework=self.name, line=first_line[method])
                for method in methods
            ]

        handler = _HANDLER_EXPORT.search(text)
        return [
            Endpoint(
                path=route,
                method=ANY_METHOD,
                file=path,
                framework=self.name,
                line=line_of(text, handler.start()) if handler else None,
            )
        ]


# ---------------------------------------------------------------------------
# Flask detector
# ---------------------------------------------------------------------------

_FLASK_PATTERN = re.compile(
    r"@(?P<router>\w+)\.route\(\s*(['\"])(?P<path>[^'\"]+)\2(?P<rest>[^)]*)\)",
)
_FLASK_METHODS = re.compile(r"methods\s*=\s*[\[(](?P<methods>[^\])]*)")


class FlaskDetector:
    """Locate Flask ``route`` decorators on apps and blueprints."""

    name = "Flask"

    def supports(self, path: str, spec: LanguageSpec) -> bool:
        return spec.family == PYTHON_FAMILY

    def extract(self, path: str, text: str, spec: LanguageSpec) -> Iterable[Endpoint]:
        for match in _FLASK_PATTERN.finditer(text):
            methods = ["GET"]
            declared = _FLASK_METHODS.search(match.group("rest"))
            if declared:
                parsed = [
                    item.strip().strip("'\"")
                    for item in declared.group("methods").split(",")
                ]
                methods = [item for item in parsed if item] or methods
            line = line_of(text, match.start())
            for method in methods:
                yield Endpoint(
                    path=match.group("path"),
                    method=method,
                    file=path,
                    framework=self.name,
                    line=line,
                )


# ---------------------------------------------------------------------------
# FastAPI detector
# ---------------------------------------------------------------------------

_FASTAPI_PATTERN = re.compile(
    r"@(?P<router>\w+)\.(?P<verb>get|post|put|delete|patch|options|head)\(\s*(['\"])(?P<path>[^'\"]*)\3",
    re.IGNORECASE,
)


class FastAPIDetector:
    """Locate FastAPI route decorators."""

    name = "FastAPI"

    def supports(self, path: str, spec: LanguageSpec) -> bool:
        return spec.family == PYTHON_FAMILY

    def extract(self, path: str, text: str, spec: LanguageSpec) -> Iterable[Endpoint]:
        for match in _FASTAPI_PATTERN.finditer(text):
            yield Endpoint(
                path=match.group("path") or "/",
                method=match.group("verb"),
                file=path,
                framework=self.name,
                line=line_of(text, match.start()),
            )


__all__ = [
    "ExpressDetector",
    "FastAPIDetector",
    "FileRouteDetector",
    "FlaskDetector",
    "file_route_path",
]

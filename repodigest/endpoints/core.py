"""Shared endpoint detection helpers."""

from __future__ import annotations

from typing import Iterable, List, Protocol, Sequence

from ..languages import LanguageSpec
from ..logging import get_logger
from ..models import Endpoint

logger = get_logger("endpoints")

HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
ANY_METHOD = "ANY"

ROUTE_FILE_MARKERS: tuple[str, ...] = (
    "/api/",
    "/routes/",
    "/controllers/",
    "/endpoints/",
    "Controller",
    "ApiHandler",
)


class EndpointDetector(Protocol):
    """Contract for detectors that emit endpoints from one source file."""

    name: str

    def supports(self, path: str, spec: LanguageSpec) -> bool:
        ...

    def extract(self, path: str, text: str, spec: LanguageSpec) -> Iterable[Endpoint]:
        ...


def is_route_file(path: str) -> bool:
    """True when the path follows a route/controller naming convention."""
    anchored = f"/{path}"
    return any(marker in anchored for marker in ROUTE_FILE_MARKERS)


def method_upper(value: str) -> str:
    """Normalize HTTP verbs to uppercase, mapping catch-all verbs to ANY."""
    verb = (value or "").strip().upper()
    if verb in {"ALL", "ANY", "*"}:
        return ANY_METHOD
    return verb


def line_of(text: str, index: int) -> int:
    """Return 1-based line number for a character index."""
    return text.count("\n", 0, index) + 1


class DetectorRegistry:
    """Runs every applicable detector over a file without deduplication."""

    def __init__(self, detectors: Sequence[EndpointDetector]) -> None:
        self._detectors = list(detectors)

    @property
    def detectors(self) -> List[EndpointDetector]:
        return list(self._detectors)

    def run(self, path: str, text: str, spec: LanguageSpec) -> List[Endpoint]:
        if not is_route_file(path):
            return []
        endpoints: List[Endpoint] = []
        for detector in self._detectors:
            if not detector.supports(path, spec):
                continue
            for endpoint in detector.extract(path, text, spec):
                endpoints.append(
                    Endpoint(
                        path=endpoint.path,
                        method=method_upper(endpoint.method),
                        file=endpoint.file,
                        framework=endpoint.framework,
                        line=endpoint.line,
                    )
                )
        if endpoints:
            logger.debug("Detected %d endpoints in %s", len(endpoints), path)
        return endpoints


__all__ = [
    "ANY_METHOD",
    "DetectorRegistry",
    "EndpointDetector",
    "HTTP_METHODS",
    "ROUTE_FILE_MARKERS",
    "is_route_file",
    "line_of",
    "method_upper",
]

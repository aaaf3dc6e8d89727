"""HTTP endpoint detection across routing conventions."""

from __future__ import annotations

from typing import List

from ..languages import LanguageSpec
from ..models import Endpoint
from .core import ANY_METHOD, DetectorRegistry, EndpointDetector, is_route_file
from .detectors import ExpressDetector, FastAPIDetector, FileRouteDetector, FlaskDetector


def default_registry() -> DetectorRegistry:
    """Return a registry with every built-in detector in a fixed order."""
    return DetectorRegistry(
        [ExpressDetector(), FileRouteDetector(), FlaskDetector(), FastAPIDetector()]
    )


_DEFAULT_REGISTRY = default_registry()


def extract_endpoints(path: str, text: str, spec: LanguageSpec) -> List[Endpoint]:
    """Detect endpoints declared by one source file."""
    return _DEFAULT_REGISTRY.run(path, text, spec)


__all__ = [
    "ANY_METHOD",
    "DetectorRegistry",
    "EndpointDetector",
    "default_registry",
    "extract_endpoints",
    "is_route_file",
]

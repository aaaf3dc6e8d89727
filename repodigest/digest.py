"""Bounded summaries of a dependency graph and API surface."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .models import ApiSurface, CentralModule, DependencyGraph, Digest
from .tree import truncate_tree

DEFAULT_TOP_N = 5
DEFAULT_MAX_TREE_LINES = 400
DEFAULT_MAX_README_CHARS = 8000
README_TRUNCATION_MARKER = "... [README truncated due to length]"
_TEMPLATES_DIR = Path(__file__).parent / "templates"
_TEMPLATE_NAME = "digest.md.j2"


def generate_digest(
    graph: DependencyGraph, surface: ApiSurface, *, top_n: int = DEFAULT_TOP_N
) -> Digest:
    """Summarize graph and surface into counts and a capped top-N list."""
    if top_n < 0:
        raise ValueError("top_n must be non-negative")

    # sorted() is stable, so equal counts keep graph order.
    ranked = sorted(graph.nodes.values(), key=lambda node: -len(node.incoming))
    central = tuple(
        CentralModule(id=node.id, name=node.name, incoming=len(node.incoming))
        for node in ranked[:top_n]
    )

    endpoints_by_method: Dict[str, int] = {}
    for endpoint in surface.endpoints:
        endpoints_by_method[endpoint.method] = endpoints_by_method.get(endpoint.method, 0) + 1

    exports_by_kind: Dict[str, int] = {}
    for library in surface.libraries:
        for symbol in library.exports:
            exports_by_kind[symbol.kind] = exports_by_kind.get(symbol.kind, 0) + 1

    return Digest(
        module_count=len(graph.nodes),
        central_modules=central,
        endpoint_count=len(surface.endpoints),
        endpoints_by_method=endpoints_by_method,
        library_count=len(surface.libraries),
        exports_by_kind=exports_by_kind,
    )


def _create_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


_ENV = _create_env()


def render_digest(
    digest: Digest,
    *,
    tree: Optional[str] = None,
    repo_name: Optional[str] = None,
    max_tree_lines: int = DEFAULT_MAX_TREE_LINES,
    readme: Optional[str] = None,
    max_readme_chars: int = DEFAULT_MAX_README_CHARS,
) -> str:
    """Render the digest as text for a downstream context assembler.

    The README is included only when given; a missing README is reported by
    name when ``repo_name`` is known.
    """
    template = _ENV.get_template(_TEMPLATE_NAME)
    bounded_tree = truncate_tree(tree, max_tree_lines) if tree else None
    bounded_readme = truncate_readme(readme, max_readme_chars) if readme else None
    return template.render(
        digest=digest, tree=bounded_tree, repo_name=repo_name, readme=bounded_readme
    )


def truncate_readme(readme: str, max_chars: int) -> str:
    """Cap README text to ``max_chars`` characters with a truncation marker."""
    if len(readme) <= max_chars:
        return readme
    return readme[:max_chars] + README_TRUNCATION_MARKER


__all__ = [
    "DEFAULT_MAX_README_CHARS",
    "DEFAULT_MAX_TREE_LINES",
    "DEFAULT_TOP_N",
    "README_TRUNCATION_MARKER",
    "generate_digest",
    "render_digest",
    "truncate_readme",
]

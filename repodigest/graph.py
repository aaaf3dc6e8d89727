"""Dependency graph construction from resolved imports."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Sequence, Set

from .imports import extract_imports
from .languages import classify, module_name
from .logging import get_logger
from .models import DependencyGraph, ModuleNode
from .resolver import ImportResolver

logger = get_logger("graph")


def build_graph(
    sources: Mapping[str, str],
    resolver: Optional[ImportResolver] = None,
    *,
    imports: Optional[Mapping[str, Sequence[str]]] = None,
    workers: int = 1,
    alias_markers: Sequence[str] = ("@",),
) -> DependencyGraph:
    """Build a dependency graph over classified source files.

    ``sources`` maps each admitted, classifiable path to its decoded text.
    When ``imports`` is given it supplies pre-extracted raw specifiers per
    path; otherwise they are extracted here. Resolution fans out over a
    thread pool and the edge sets are merged by a single writer.
    """
    node_ids = sorted(sources)
    languages: Dict[str, str] = {}
    for path in node_ids:
        spec = classify(path)
        languages[path] = spec.tag if spec is not None else "Unknown"

    if resolver is None:
        resolver = ImportResolver(node_ids, alias_markers=alias_markers)

    if imports is None:
        imports = {path: _safe_extract(path, sources[path], alias_markers) for path in node_ids}

    known = frozenset(node_ids)

    def _targets(path: str) -> Set[str]:
        targets: Set[str] = set()
        for specifier in imports.get(path, ()):
            resolved = resolver.resolve(specifier, path)
            if resolved is None or resolved == path or resolved not in known:
                continue
            targets.add(resolved)
        return targets

    if workers > 1 and len(node_ids) > 1:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="repodigest-resolve") as executor:
            resolved_sets: List[Set[str]] = list(executor.map(_targets, node_ids))
    else:
        resolved_sets = [_targets(path) for path in node_ids]

    outgoing: Dict[str, Set[str]] = {path: set() for path in node_ids}
    incoming: Dict[str, Set[str]] = {path: set() for path in node_ids}
    for path, targets in zip(node_ids, resolved_sets):
        for target in targets:
            outgoing[path].add(target)
            incoming[target].add(path)

    nodes = {
        path: ModuleNode(
            id=path,
            name=module_name(path),
            language=languages[path],
            outgoing=frozenset(outgoing[path]),
            incoming=frozenset(incoming[path]),
        )
        for path in node_ids
    }
    edge_count = sum(len(targets) for targets in outgoing.values())
    logger.debug("Built dependency graph with %d nodes and %d edges", len(nodes), edge_count)
    return DependencyGraph(nodes=nodes)


def _safe_extract(path: str, text: str, alias_markers: Sequence[str]) -> List[str]:
    spec = classify(path)
    if spec is None:
        return []
    try:
        return extract_imports(text, spec, alias_markers=alias_markers)
    except Exception as exc:
        logger.warning("Import extraction failed for %s: %s", path, exc)
        return []


__all__ = ["build_graph"]

"""JSON snapshots of ingestion results."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Mapping

from ..errors import RepoDigestError
from ..models import (
    ApiSurface,
    CentralModule,
    DependencyGraph,
    Digest,
    Endpoint,
    ExportedSymbol,
    IngestionResult,
    Library,
    ModuleNode,
    SkippedFile,
)

# Version 2 stores count maps as [key, count] pairs and carries the README.
_SNAPSHOT_VERSION = 2


def _pairs(counts: Mapping[str, int]) -> List[List[Any]]:
    # JSON objects are re-sorted by save_snapshot; first-appearance order lives in the list.
    return [[key, count] for key, count in counts.items()]


def _from_pairs(raw: Any) -> Dict[str, int]:
    return {str(key): int(count) for key, count in raw}


def result_to_dict(result: IngestionResult) -> Dict[str, Any]:
    """Serialise a result, preserving edge direction, methods and export kinds."""
    return {
        "version": _SNAPSHOT_VERSION,
        "run_id": result.run_id,
        "tree": result.tree,
        "graph": {
            node_id: {
                "name": node.name,
                "language": node.language,
                "outgoing": sorted(node.outgoing),
                "incoming": sorted(node.incoming),
            }
            for node_id, node in result.graph.nodes.items()
        },
        "surface": {
            "endpoints": [asdict(endpoint) for endpoint in result.surface.endpoints],
            "libraries": [
                {
                    "name": library.name,
                    "file": library.file,
                    "exports": [asdict(symbol) for symbol in library.exports],
                }
                for library in result.surface.libraries
            ],
        },
        "digest": {
            "module_count": result.digest.module_count,
            "central_modules": [asdict(module) for module in result.digest.central_modules],
            "endpoint_count": result.digest.endpoint_count,
            "endpoints_by_method": _pairs(result.digest.endpoints_by_method),
            "library_count": result.digest.library_count,
            "exports_by_kind": _pairs(result.digest.exports_by_kind),
        },
        "skipped": [asdict(item) for item in result.skipped],
        "readme": result.readme,
    }


def result_from_dict(payload: Any) -> IngestionResult:
    """Rebuild a result from :func:`result_to_dict` output."""
    if not isinstance(payload, dict) or payload.get("version") != _SNAPSHOT_VERSION:
        raise RepoDigestError("Unsupported snapshot payload")
    try:
        nodes = {
            node_id: ModuleNode(
                id=node_id,
                name=raw["name"],
                language=raw["language"],
                outgoing=frozenset(raw["outgoing"]),
                incoming=frozenset(raw["incoming"]),
            )
            for node_id, raw in payload["graph"].items()
        }
        surface_data = payload["surface"]
        endpoints = tuple(Endpoint(**raw) for raw in surface_data["endpoints"])
        libraries = tuple(
            Library(
                name=raw["name"],
                file=raw["file"],
                exports=tuple(ExportedSymbol(**symbol) for symbol in raw["exports"]),
            )
            for raw in surface_data["libraries"]
        )
        digest_data = payload["digest"]
        digest = Digest(
            module_count=digest_data["module_count"],
            central_modules=tuple(CentralModule(**raw) for raw in digest_data["central_modules"]),
            endpoint_count=digest_data["endpoint_count"],
            endpoints_by_method=_from_pairs(digest_data["endpoints_by_method"]),
            library_count=digest_data["library_count"],
            exports_by_kind=_from_pairs(digest_data["exports_by_kind"]),
        )
        skipped: List[SkippedFile] = [SkippedFile(**raw) for raw in payload.get("skipped", [])]
        return IngestionResult(
            run_id=payload["run_id"],
            tree=payload["tree"],
            graph=DependencyGraph(nodes=nodes),
            surface=ApiSurface(endpoints=endpoints, libraries=libraries),
            digest=digest,
            skipped=tuple(skipped),
            readme=payload.get("readme"),
        )
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise RepoDigestError(f"Malformed snapshot: {exc}") from exc


def save_snapshot(path: Path, result: IngestionResult) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result_to_dict(result), indent=2, sort_keys=True), encoding="utf-8")


def load_snapshot(path: Path) -> IngestionResult:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise RepoDigestError(f"Snapshot {path} is not valid JSON: {exc}") from exc
    return result_from_dict(payload)


__all__ = ["load_snapshot", "result_from_dict", "result_to_dict", "save_snapshot"]

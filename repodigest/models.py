"""Core data models shared across repodigest components."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Optional, Tuple

FileMap = Mapping[str, bytes]
"""Repository-relative POSIX path mapped to raw file content."""

EXPORT_KINDS = ("class", "function", "constant", "interface", "other")


@dataclass(frozen=True)
class ModuleNode:
    """One admitted source file and its position in the dependency graph."""

    id: str
    name: str
    language: str
    outgoing: frozenset = field(default_factory=frozenset)
    incoming: frozenset = field(default_factory=frozenset)


@dataclass(frozen=True)
class DependencyGraph:
    """Module nodes keyed by path, with symmetric incoming/outgoing edges."""

    nodes: Mapping[str, ModuleNode] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.nodes)

    def edges(self) -> Iterator[Tuple[str, str]]:
        """Yield ``(importer, imported)`` pairs in node order."""
        for node_id, node in self.nodes.items():
            for target in sorted(node.outgoing):
                yield node_id, target


@dataclass(frozen=True)
class Endpoint:
    """One detected HTTP route attributable to a source file."""

    path: str
    method: str
    file: str
    framework: Optional[str] = None
    line: Optional[int] = None


@dataclass(frozen=True)
class ExportedSymbol:
    """Top-level symbol a module makes visible to its importers."""

    name: str
    kind: str
    library: str


@dataclass(frozen=True)
class Library:
    """A module that exports at least one symbol."""

    name: str
    file: str
    exports: Tuple[ExportedSymbol, ...] = ()


@dataclass(frozen=True)
class ApiSurface:
    """Endpoints and exported libraries detected in a repository."""

    endpoints: Tuple[Endpoint, ...] = ()
    libraries: Tuple[Library, ...] = ()


@dataclass(frozen=True)
class CentralModule:
    """Summary row for a heavily imported module."""

    id: str
    name: str
    incoming: int


@dataclass(frozen=True)
class Digest:
    """Bounded summary of a dependency graph and API surface."""

    module_count: int
    central_modules: Tuple[CentralModule, ...]
    endpoint_count: int
    endpoints_by_method: Dict[str, int]
    library_count: int
    exports_by_kind: Dict[str, int]


@dataclass(frozen=True)
class SkippedFile:
    """A file the pipeline declined to analyze."""

    path: str
    reason: str


@dataclass(frozen=True)
class IngestionResult:
    """Everything produced by one ingestion run."""

    run_id: str
    tree: str
    graph: DependencyGraph
    surface: ApiSurface
    digest: Digest
    skipped: Tuple[SkippedFile, ...] = ()
    readme: Optional[str] = None

"""Ingestion pipeline turning a file map into graph, surface, tree and digest."""

from __future__ import annotations

import hashlib
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .archive import find_readme
from .config import DigestConfig
from .digest import generate_digest
from .endpoints import DetectorRegistry, default_registry
from .errors import ArchiveError
from .exports import extract_exports
from .graph import build_graph
from .ignore import IgnoreFilter
from .imports import extract_imports
from .languages import LanguageSpec, classify
from .logging import get_logger
from .models import ApiSurface, Endpoint, FileMap, IngestionResult, Library, SkippedFile
from .resolver import ImportResolver
from .stores import RunCache
from .tree import render_tree


@dataclass
class _FileAnalysis:
    """Per-file extraction output produced inside the worker pool."""

    path: str
    imports: List[str] = field(default_factory=list)
    endpoints: List[Endpoint] = field(default_factory=list)
    library: Optional[Library] = None
    errors: List[str] = field(default_factory=list)


def fingerprint(file_map: FileMap) -> str:
    """Stable identity for a file map, used as the default run id."""
    digest = hashlib.sha256()
    for path in sorted(file_map):
        digest.update(path.encode("utf-8"))
        digest.update(b"\0")
        digest.update(hashlib.sha256(file_map[path]).digest())
    return digest.hexdigest()


class IngestionPipeline:
    """Runs one ingestion job per call; no state is shared between runs."""

    def __init__(
        self,
        config: DigestConfig | None = None,
        *,
        registry: DetectorRegistry | None = None,
        cache: RunCache | None = None,
    ) -> None:
        self.config = config or DigestConfig()
        self.registry = registry or default_registry()
        self.cache = cache
        self.logger = get_logger("pipeline")

    def run(self, file_map: FileMap, *, run_id: str | None = None) -> IngestionResult:
        """Analyze a file map and return every derived structure."""
        if file_map is None:
            raise ArchiveError("Cannot ingest a missing file map")

        run_id = run_id or fingerprint(file_map)
        self.logger.info("Starting ingestion run %s (%d archive entries)", run_id[:12], len(file_map))

        ignore = IgnoreFilter.from_file_map(
            file_map,
            self.config.ignore.fragments,
            use_gitignore=self.config.ignore.use_gitignore,
        )
        admitted = ignore.filter_paths(file_map)
        self.logger.debug("Admitted %d of %d paths", len(admitted), len(file_map))
        tree = render_tree(admitted)
        readme = find_readme({path: file_map[path] for path in admitted})

        classified: Dict[str, LanguageSpec] = {}
        for path in admitted:
            spec = classify(path)
            if spec is not None:
                classified[path] = spec

        sources, skipped = self._decode_sources(file_map, classified)
        analyses = self._analyze(sources, classified)

        # Single-writer merge in path order once every worker has finished.
        imports: Dict[str, List[str]] = {}
        endpoints: List[Endpoint] = []
        libraries: List[Library] = []
        for analysis in analyses:
            imports[analysis.path] = analysis.imports
            endpoints.extend(analysis.endpoints)
            if analysis.library is not None:
                libraries.append(analysis.library)
            for error in analysis.errors:
                skipped.append(SkippedFile(path=analysis.path, reason=error))

        resolver = ImportResolver(admitted, alias_markers=self.config.resolver.alias_markers)
        graph = build_graph(
            {path: sources.get(path, "") for path in classified},
            resolver,
            imports=imports,
            workers=self.config.workers,
            alias_markers=self.config.resolver.alias_markers,
        )
        surface = ApiSurface(endpoints=tuple(endpoints), libraries=tuple(libraries))
        digest = generate_digest(graph, surface, top_n=self.config.digest.top_n)

        result = IngestionResult(
            run_id=run_id,
            tree=tree,
            graph=graph,
            surface=surface,
            digest=digest,
            skipped=tuple(sorted(skipped, key=lambda item: item.path)),
            readme=readme,
        )
        self.logger.info(
            "Finished run %s: %d modules, %d endpoints, %d libraries, %d skipped",
            run_id[:12],
            digest.module_count,
            digest.endpoint_count,
            digest.library_count,
            len(result.skipped),
        )
        if self.cache is not None:
            self.cache.put(result)
        return result

    def submit(
        self,
        file_map: FileMap,
        *,
        run_id: str | None = None,
        executor: Executor | None = None,
    ) -> "Future[IngestionResult]":
        """Start a run in the background and return its future.

        Listeners attach with ``Future.add_done_callback``.
        """
        if executor is not None:
            return executor.submit(self.run, file_map, run_id=run_id)
        owned = ThreadPoolExecutor(max_workers=1, thread_name_prefix="repodigest-ingest")
        try:
            return owned.submit(self.run, file_map, run_id=run_id)
        finally:
            owned.shutdown(wait=False)

    def _decode_sources(
        self, file_map: FileMap, classified: Dict[str, LanguageSpec]
    ) -> Tuple[Dict[str, str], List[SkippedFile]]:
        limit = self.config.limits.max_file_bytes
        sources: Dict[str, str] = {}
        skipped: List[SkippedFile] = []
        for path in classified:
            content = file_map[path]
            if len(content) > limit:
                self.logger.warning("Skipping %s: %d bytes exceeds limit of %d", path, len(content), limit)
                skipped.append(SkippedFile(path=path, reason=f"exceeds {limit} bytes"))
                continue
            try:
                sources[path] = content.decode("utf-8-sig")
            except UnicodeDecodeError:
                self.logger.warning("Skipping %s: content is not valid UTF-8", path)
                skipped.append(SkippedFile(path=path, reason="undecodable"))
        return sources, skipped

    def _analyze(
        self, sources: Dict[str, str], classified: Dict[str, LanguageSpec]
    ) -> List[_FileAnalysis]:
        paths = sorted(sources)
        workers = max(1, self.config.workers)
        if workers == 1 or len(paths) <= 1:
            return [self._analyze_file(path, sources[path], classified[path]) for path in paths]
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="repodigest-extract") as executor:
            return list(
                executor.map(
                    lambda path: self._analyze_file(path, sources[path], classified[path]),
                    paths,
                )
            )

    def _analyze_file(self, path: str, text: str, spec: LanguageSpec) -> _FileAnalysis:
        analysis = _FileAnalysis(path=path)
        markers = self.config.resolver.alias_markers
        try:
            analysis.imports = extract_imports(text, spec, alias_markers=markers)
        except Exception as exc:
            analysis.errors.append(self._extraction_failed("imports", path, exc))
        try:
            analysis.endpoints = self.registry.run(path, text, spec)
        except Exception as exc:
            analysis.errors.append(self._extraction_failed("endpoints", path, exc))
        try:
            analysis.library = extract_exports(path, text, spec)
        except Exception as exc:
            analysis.errors.append(self._extraction_failed("exports", path, exc))
        return analysis

    def _extraction_failed(self, stage: str, path: str, exc: Exception) -> str:
        self.logger.warning("%s extraction failed for %s: %s", stage.capitalize(), path, exc)
        return f"{stage} extraction failed: {exc}"


__all__ = ["IngestionPipeline", "fingerprint"]

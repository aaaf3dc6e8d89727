"""FastAPI application exposing repodigest ingestion as a service."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..archive import load_file_map
from ..config import DigestConfig, DigestSettings, load_config
from ..digest import render_digest
from ..errors import ArchiveError, ConfigError
from ..models import IngestionResult
from ..pipeline import IngestionPipeline
from ..stores import RunCache


class IngestRequest(BaseModel):
    archive_path: str
    config_path: Optional[str] = None
    run_id: Optional[str] = None


class CentralModuleModel(BaseModel):
    id: str
    name: str
    incoming: int


class DigestModel(BaseModel):
    module_count: int
    central_modules: List[CentralModuleModel]
    endpoint_count: int
    endpoints_by_method: Dict[str, int]
    library_count: int
    exports_by_kind: Dict[str, int]
    text: str


class IngestResponse(BaseModel):
    run_id: str
    digest: DigestModel
    skipped: int


class TreeResponse(BaseModel):
    run_id: str
    tree: str


class HealthResponse(BaseModel):
    status: str


def _digest_model(result: IngestionResult, settings: DigestSettings, *, tree: str | None = None) -> DigestModel:
    digest = result.digest
    return DigestModel(
        module_count=digest.module_count,
        central_modules=[
            CentralModuleModel(id=module.id, name=module.name, incoming=module.incoming)
            for module in digest.central_modules
        ],
        endpoint_count=digest.endpoint_count,
        endpoints_by_method=dict(digest.endpoints_by_method),
        library_count=digest.library_count,
        exports_by_kind=dict(digest.exports_by_kind),
        text=render_digest(
            digest,
            tree=tree,
            max_tree_lines=settings.max_tree_lines,
            readme=result.readme,
            max_readme_chars=settings.max_readme_chars,
        ),
    )


def _default_pipeline(config: DigestConfig, cache: RunCache) -> IngestionPipeline:
    return IngestionPipeline(config, cache=cache)


def create_app(
    pipeline_factory: Callable[[DigestConfig, RunCache], IngestionPipeline] = _default_pipeline,
    cache: RunCache | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing ingestion and cached digests."""

    app = FastAPI(title="repodigest", version="0.1.0")
    run_cache = cache if cache is not None else RunCache()
    app.state.run_cache = run_cache
    # Render settings of the config each cached run was ingested with.
    run_settings: Dict[str, DigestSettings] = {}

    async def get_cache() -> RunCache:
        return run_cache

    def _lookup(run_id: str) -> IngestionResult:
        result = run_cache.get(run_id)
        if result is None:
            raise HTTPException(status_code=404, detail=f"Unknown run: {run_id}")
        return result

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/ingest", response_model=IngestResponse)
    async def ingest(payload: IngestRequest, runs: RunCache = Depends(get_cache)) -> IngestResponse:
        config = load_config(payload.config_path)

        def _run() -> IngestionResult:
            file_map = load_file_map(
                payload.archive_path,
                max_entries=config.limits.max_archive_entries,
                max_total_bytes=config.limits.max_archive_bytes,
            )
            return pipeline_factory(config, runs).run(file_map, run_id=payload.run_id)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        if result.run_id not in runs:
            runs.put(result)
        run_settings[result.run_id] = config.digest
        for stale in set(run_settings) - set(runs.run_ids()):
            del run_settings[stale]
        return IngestResponse(
            run_id=result.run_id,
            digest=_digest_model(result, config.digest),
            skipped=len(result.skipped),
        )

    @app.get("/runs/{run_id}/digest", response_model=DigestModel)
    async def run_digest(run_id: str) -> DigestModel:
        result = _lookup(run_id)
        settings = run_settings.get(run_id, DigestSettings())
        return _digest_model(result, settings, tree=result.tree)

    @app.get("/runs/{run_id}/tree", response_model=TreeResponse)
    async def run_tree(run_id: str) -> TreeResponse:
        result = _lookup(run_id)
        return TreeResponse(run_id=run_id, tree=result.tree)

    @app.delete("/runs/{run_id}", status_code=204)
    async def invalidate_run(run_id: str) -> None:
        run_settings.pop(run_id, None)
        if not run_cache.invalidate(run_id):
            raise HTTPException(status_code=404, detail=f"Unknown run: {run_id}")

    @app.exception_handler(ArchiveError)
    async def archive_error_handler(_: Any, exc: ArchiveError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)

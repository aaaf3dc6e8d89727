"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from repodigest.service import create_app
from repodigest.stores import RunCache
from tests._fixtures.archive_builder import ArchiveBuilder


@pytest.fixture
def cache() -> RunCache:
    return RunCache()


@pytest.fixture
def client(cache: RunCache) -> TestClient:
    return TestClient(create_app(cache=cache))


@pytest.fixture
def archive_path(archive_builder: ArchiveBuilder) -> Path:
    archive_builder.write(
        {
            "src/routes/orders.js": """
                const router = require('express').Router();
                const service = require('../services/orders');
                router.get('/orders', service.list);
                module.exports = router;
            """,
            "src/services/orders.js": "exports.list = () => [];\n",
        }
    )
    return archive_builder.build()


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ingest_returns_digest_and_caches_run(
    client: TestClient, cache: RunCache, archive_path: Path
) -> None:
    response = client.post("/ingest", json={"archive_path": str(archive_path), "run_id": "r1"})

    assert response.status_code == 200
    data = response.json()
    assert data["run_id"] == "r1"
    assert data["skipped"] == 0
    assert data["digest"]["module_count"] == 2
    assert data["digest"]["endpoints_by_method"] == {"GET": 1}
    assert data["digest"]["central_modules"][0]["id"] == "repo-main/src/services/orders.js"
    assert "API Surface Analysis:" in data["digest"]["text"]
    assert "r1" in cache


def test_run_digest_and_tree_lookup(client: TestClient, archive_path: Path) -> None:
    run_id = client.post("/ingest", json={"archive_path": str(archive_path)}).json()["run_id"]

    digest = client.get(f"/runs/{run_id}/digest")
    tree = client.get(f"/runs/{run_id}/tree")

    assert digest.status_code == 200
    assert "Repository file structure:" in digest.json()["text"]
    assert tree.status_code == 200
    assert tree.json()["tree"].startswith("repo-main/\n")


def test_unknown_run_returns_404(client: TestClient) -> None:
    assert client.get("/runs/nope/digest").status_code == 404
    assert client.get("/runs/nope/tree").status_code == 404
    assert client.delete("/runs/nope").status_code == 404


def test_delete_invalidates_run(client: TestClient, archive_path: Path) -> None:
    client.post("/ingest", json={"archive_path": str(archive_path), "run_id": "r2"})

    assert client.delete("/runs/r2").status_code == 204
    assert client.get("/runs/r2/tree").status_code == 404


def test_ingest_missing_archive_returns_400(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/ingest", json={"archive_path": str(tmp_path / "missing.zip")})

    assert response.status_code == 400
    assert "Archive not found" in response.json()["detail"]


def test_ingest_invalid_config_returns_400(client: TestClient, archive_path: Path, tmp_path: Path) -> None:
    config_file = tmp_path / "bad.yml"
    config_file.write_text("workers: -1\n", encoding="utf-8")

    response = client.post(
        "/ingest",
        json={"archive_path": str(archive_path), "config_path": str(config_file)},
    )

    assert response.status_code == 400


def test_run_digest_uses_tree_cap_from_ingest_config(
    client: TestClient, archive_path: Path, tmp_path: Path
) -> None:
    config_file = tmp_path / "small.yml"
    config_file.write_text("digest:\n  max_tree_lines: 2\n", encoding="utf-8")
    client.post(
        "/ingest",
        json={"archive_path": str(archive_path), "config_path": str(config_file), "run_id": "capped"},
    )
    client.post("/ingest", json={"archive_path": str(archive_path), "run_id": "default"})

    capped = client.get("/runs/capped/digest").json()["text"]
    uncapped = client.get("/runs/default/digest").json()["text"]

    assert "more entries omitted" in capped
    assert "more entries omitted" not in uncapped


def test_run_digest_includes_readme(archive_builder: ArchiveBuilder, client: TestClient) -> None:
    archive_builder.write({"README.md": "# Orders\n\nTracks orders.\n", "src/a.py": "x = 1\n"})
    client.post("/ingest", json={"archive_path": str(archive_builder.build()), "run_id": "docs"})

    text = client.get("/runs/docs/digest").json()["text"]

    assert "Repository README content:" in text
    assert "Tracks orders." in text

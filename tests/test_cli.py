"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from repodigest.cli import _build_parser, main
from tests._fixtures.archive_builder import ArchiveBuilder


def _archive(builder: ArchiveBuilder) -> Path:
    builder.write(
        {
            "src/index.ts": "import { util } from './util';\n",
            "src/util.ts": "export function util() {}\n",
        }
    )
    return builder.build("demo.zip")


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "digest", "repo.zip"])
    assert args.verbose is True
    assert args.command == "digest"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["tree", "repo.zip", "--verbose"])
    assert args.verbose is True
    assert args.command == "tree"


def test_cli_accepts_json_and_config_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(["digest", "repo.zip", "--json", "--config", "settings.yml"])
    assert args.json is True
    assert args.config == "settings.yml"


def test_cli_requires_command() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args([])


def test_cli_digest_prints_rendered_summary(
    archive_builder: ArchiveBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    main(["digest", str(_archive(archive_builder))])

    output = capsys.readouterr().out
    assert output.startswith("Repository: demo\n")
    assert "Dependency Graph Analysis (2 modules detected):" in output
    assert "└── src/" in output


def test_cli_digest_json(archive_builder: ArchiveBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    main(["digest", str(_archive(archive_builder)), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["digest"]["module_count"] == 2
    assert payload["graph"]["repo-main/src/index.ts"]["outgoing"] == ["repo-main/src/util.ts"]


def test_cli_tree(archive_builder: ArchiveBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    main(["tree", str(_archive(archive_builder))])

    assert capsys.readouterr().out.splitlines() == [
        "repo-main/",
        "└── src/",
        "    ├── index.ts",
        "    └── util.ts",
    ]


def test_cli_graph(archive_builder: ArchiveBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    main(["graph", str(_archive(archive_builder))])

    assert capsys.readouterr().out == "repo-main/src/index.ts -> repo-main/src/util.ts\n"


def test_cli_snapshot(
    archive_builder: ArchiveBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = tmp_path / "snap.json"

    main(["snapshot", str(_archive(archive_builder)), str(output)])

    assert output.exists()
    assert "Snapshot written to" in capsys.readouterr().out


def test_cli_digest_includes_truncated_readme(
    archive_builder: ArchiveBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    archive_builder.write({"README.md": "# Demo\n\n" + "word " * 40})
    config_file = tmp_path / ".repodigest.yml"
    config_file.write_text("digest:\n  max_readme_chars: 20\n", encoding="utf-8")

    main(["digest", str(_archive(archive_builder)), "--config", str(config_file)])

    output = capsys.readouterr().out
    assert "Repository README content:" in output
    assert "# Demo" in output
    assert "... [README truncated due to length]" in output


def test_cli_digest_without_readme_says_so(
    archive_builder: ArchiveBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    main(["digest", str(_archive(archive_builder))])

    assert "No README found for demo" in capsys.readouterr().out


def test_cli_log_file_receives_records(archive_builder: ArchiveBuilder, tmp_path: Path) -> None:
    log_file = tmp_path / "repodigest.log"

    main(["--log-file", str(log_file), "graph", str(_archive(archive_builder))])

    text = log_file.read_text(encoding="utf-8")
    assert "[MainThread] repodigest.pipeline: Starting ingestion run" in text


def test_cli_reports_archive_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["digest", str(tmp_path / "missing.zip")])

    assert excinfo.value.code == 1
    assert "repodigest digest failed: Archive not found" in capsys.readouterr().err


def test_cli_serve_starts_service(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, int]] = []

    def _fake_run_service(host: str, port: int) -> None:
        calls.append((host, port))

    monkeypatch.setattr("repodigest.service.run_service", _fake_run_service)

    main(["serve", "--port", "9000"])

    assert calls == [("127.0.0.1", 9000)]


def test_cli_downloads_github_urls(
    archive_builder: ArchiveBuilder,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    archive_builder.write({"src/app.ts": "export const app = 1;\n"})
    requested: list[tuple[str, str]] = []

    def _fake_download(owner: str, repo: str) -> bytes:
        requested.append((owner, repo))
        return archive_builder.zip_bytes()

    monkeypatch.setattr("repodigest.cli.download_archive", _fake_download)

    main(["tree", "https://github.com/acme/widgets"])

    assert requested == [("acme", "widgets")]
    assert "app.ts" in capsys.readouterr().out

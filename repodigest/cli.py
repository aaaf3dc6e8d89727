"""CLI entrypoints for repodigest commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .archive import download_archive, load_file_map, parse_github_url
from .config import DigestConfig, load_config
from .digest import render_digest
from .errors import RepoDigestError
from .logging import configure_logging
from .models import IngestionResult
from .pipeline import IngestionPipeline
from .stores import result_to_dict, save_snapshot

_GITHUB_PREFIXES = ("https://github.com/", "http://github.com/", "git@github.com:")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_archive_arguments(parser: argparse.ArgumentParser) -> None:
    _add_verbose_option(parser, suppress_default=True)
    parser.add_argument(
        "archive", help="Path to a zip archive of the repository, or a GitHub repository URL."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .repodigest.yml file or the directory containing it.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repodigest",
        description="Summarize a repository archive into a dependency graph and API digest.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log records, with worker thread names, to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    digest_parser = subparsers.add_parser("digest", help="Print the bounded digest.")
    _add_archive_arguments(digest_parser)
    digest_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the full result as JSON instead of rendered text.",
    )

    tree_parser = subparsers.add_parser("tree", help="Print the repository tree.")
    _add_archive_arguments(tree_parser)

    graph_parser = subparsers.add_parser("graph", help="Print dependency edges.")
    _add_archive_arguments(graph_parser)

    snapshot_parser = subparsers.add_parser("snapshot", help="Write a JSON snapshot of the run.")
    _add_archive_arguments(snapshot_parser)
    snapshot_parser.add_argument("output", help="Destination JSON file.")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def _ingest(args: argparse.Namespace, config: DigestConfig) -> IngestionResult:
    source: bytes | str = args.archive
    if args.archive.startswith(_GITHUB_PREFIXES):
        owner, repo = parse_github_url(args.archive)
        source = download_archive(owner, repo)
    file_map = load_file_map(
        source,
        max_entries=config.limits.max_archive_entries,
        max_total_bytes=config.limits.max_archive_bytes,
    )
    return IngestionPipeline(config).run(file_map)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repodigest commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    try:
        config = load_config(args.config)
        result = _ingest(args, config)
    except RepoDigestError as exc:
        parser.exit(1, f"repodigest {args.command} failed: {exc}\n")

    if args.command == "digest":
        if args.json:
            print(json.dumps(result_to_dict(result), indent=2, sort_keys=True))
        else:
            text = render_digest(
                result.digest,
                tree=result.tree,
                repo_name=Path(args.archive).stem,
                max_tree_lines=config.digest.max_tree_lines,
                readme=result.readme,
                max_readme_chars=config.digest.max_readme_chars,
            )
            print(text, end="")
    elif args.command == "tree":
        print(result.tree, end="")
    elif args.command == "graph":
        for source, target in result.graph.edges():
            print(f"{source} -> {target}")
    elif args.command == "snapshot":
        output = Path(args.output)
        save_snapshot(output, result)
        print(f"Snapshot written to {output}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])

"""Tests for repodigest.digest."""

from __future__ import annotations

import pytest

from repodigest.digest import README_TRUNCATION_MARKER, generate_digest, render_digest, truncate_readme
from repodigest.models import (
    ApiSurface,
    DependencyGraph,
    Endpoint,
    ExportedSymbol,
    Library,
    ModuleNode,
)


def _graph(incoming: dict[str, set[str]]) -> DependencyGraph:
    outgoing: dict[str, set[str]] = {node_id: set() for node_id in incoming}
    for target, sources in incoming.items():
        for source in sources:
            outgoing[source].add(target)
    nodes = {
        node_id: ModuleNode(
            id=node_id,
            name=node_id.rsplit("/", 1)[-1].split(".", 1)[0],
            language="TypeScript",
            outgoing=frozenset(outgoing[node_id]),
            incoming=frozenset(incoming[node_id]),
        )
        for node_id in sorted(incoming)
    }
    return DependencyGraph(nodes=nodes)


def _surface() -> ApiSurface:
    return ApiSurface(
        endpoints=(
            Endpoint(path="/users", method="GET", file="routes/users.ts"),
            Endpoint(path="/users", method="POST", file="routes/users.ts"),
            Endpoint(path="/users/:id", method="GET", file="routes/users.ts"),
            Endpoint(path="/api/health", method="ANY", file="api/health.ts"),
        ),
        libraries=(
            Library(
                name="users",
                file="lib/users.ts",
                exports=(
                    ExportedSymbol(name="UserService", kind="class", library="users"),
                    ExportedSymbol(name="findUser", kind="function", library="users"),
                    ExportedSymbol(name="createUser", kind="function", library="users"),
                ),
            ),
        ),
    )


def test_generate_digest_counts_and_ranks() -> None:
    graph = _graph(
        {
            "src/a.ts": set(),
            "src/b.ts": {"src/a.ts"},
            "src/c.ts": {"src/a.ts", "src/b.ts"},
        }
    )

    digest = generate_digest(graph, _surface(), top_n=2)

    assert digest.module_count == 3
    assert [(module.id, module.incoming) for module in digest.central_modules] == [
        ("src/c.ts", 2),
        ("src/b.ts", 1),
    ]
    assert digest.endpoint_count == 4
    assert digest.endpoints_by_method == {"GET": 2, "POST": 1, "ANY": 1}
    assert list(digest.endpoints_by_method) == ["GET", "POST", "ANY"]
    assert digest.library_count == 1
    assert digest.exports_by_kind == {"class": 1, "function": 2}


def test_generate_digest_breaks_ties_by_graph_order() -> None:
    graph = _graph({"src/z.ts": set(), "src/b.ts": set(), "src/m.ts": set()})

    digest = generate_digest(graph, ApiSurface())

    assert [module.id for module in digest.central_modules] == ["src/b.ts", "src/m.ts", "src/z.ts"]


def test_generate_digest_caps_top_n() -> None:
    graph = _graph({f"src/m{index}.ts": set() for index in range(10)})

    assert len(generate_digest(graph, ApiSurface(), top_n=5).central_modules) == 5
    assert generate_digest(graph, ApiSurface(), top_n=0).central_modules == ()


def test_generate_digest_rejects_negative_top_n() -> None:
    with pytest.raises(ValueError):
        generate_digest(DependencyGraph(), ApiSurface(), top_n=-1)


def test_generate_digest_empty_inputs_yield_zeros() -> None:
    digest = generate_digest(DependencyGraph(), ApiSurface())

    assert digest.module_count == 0
    assert digest.central_modules == ()
    assert digest.endpoint_count == 0
    assert digest.endpoints_by_method == {}
    assert digest.library_count == 0
    assert digest.exports_by_kind == {}


def test_render_digest_includes_summary_sections() -> None:
    graph = _graph({"src/a.ts": set(), "src/b.ts": {"src/a.ts"}})
    digest = generate_digest(graph, _surface())

    text = render_digest(digest, repo_name="demo")

    assert text.startswith("Repository: demo\n")
    assert "Dependency Graph Analysis (2 modules detected):" in text
    assert "- b (src/b.ts, 1 dependents)" in text
    assert "API Surface Analysis:" in text
    assert "- 4 API endpoints identified" in text
    assert "  - GET: 2 endpoints" in text
    assert "- 1 public libraries/modules identified" in text
    assert "  - 2 function exports" in text
    assert "Repository file structure" not in text


def test_render_digest_truncates_tree() -> None:
    digest = generate_digest(DependencyGraph(), ApiSurface())
    tree = "repo/\n" + "".join(f"├── file{index}.ts\n" for index in range(10))

    text = render_digest(digest, tree=tree, max_tree_lines=3)

    assert "Repository file structure:" in text
    assert "├── file1.ts\n" in text
    assert "file2.ts" not in text
    assert "... (8 more entries omitted)" in text
    assert "- No internal module dependencies resolved" in text


def test_render_digest_places_readme_before_tree() -> None:
    digest = generate_digest(DependencyGraph(), ApiSurface())

    text = render_digest(digest, tree="repo/\n└── a.ts\n", repo_name="demo", readme="# Demo\nHello.\n")

    assert "Repository README content:\n```markdown\n# Demo\nHello.\n```" in text
    assert text.index("README content") < text.index("Repository file structure:")
    assert "No README found" not in text


def test_render_digest_reports_missing_readme_for_named_repo() -> None:
    digest = generate_digest(DependencyGraph(), ApiSurface())

    assert "No README found for demo" in render_digest(digest, repo_name="demo")
    assert "README" not in render_digest(digest)


def test_render_digest_truncates_long_readme() -> None:
    digest = generate_digest(DependencyGraph(), ApiSurface())

    text = render_digest(digest, readme="abcdefghij" * 5, max_readme_chars=12)

    assert "abcdefghijab" + README_TRUNCATION_MARKER in text
    assert "abcdefghijabc" not in text


def test_truncate_readme_leaves_short_text_untouched() -> None:
    assert truncate_readme("short", 10) == "short"
    assert truncate_readme("x" * 11, 10) == "x" * 10 + README_TRUNCATION_MARKER

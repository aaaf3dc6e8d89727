"""Human-readable tree listing of admitted archive paths."""

from __future__ import annotations

from typing import Dict, Iterable, List, Set, Tuple

from .ignore import archive_root

EMPTY_TREE = "Repository is empty or contains only ignored files."


class _Dir:
    """Directory entry; a name may be both a file and a directory."""

    def __init__(self) -> None:
        self.dirs: Dict[str, _Dir] = {}
        self.files: Set[str] = set()

    def entries(self) -> List[Tuple[str, bool]]:
        return sorted([(name, False) for name in self.files] + [(name, True) for name in self.dirs])


def render_tree(paths: Iterable[str]) -> str:
    """Render sorted paths as an indented tree rooted at the archive folder.

    Directories are inferred from path segments and printed with a trailing
    ``/``. Every path appears exactly once.
    """
    ordered = sorted(set(paths))
    if not ordered:
        return EMPTY_TREE

    root = archive_root(ordered)
    prefix = f"{root}/" if root else ""
    tree = _Dir()
    for path in ordered:
        relative = path[len(prefix) :] if prefix else path
        _insert(tree, [part for part in relative.split("/") if part])

    lines: List[str] = [f"{root}/" if root else "./"]
    _render(tree, "", lines)
    return "\n".join(lines) + "\n"


def _insert(tree: _Dir, parts: List[str]) -> None:
    node = tree
    for part in parts[:-1]:
        node = node.dirs.setdefault(part, _Dir())
    if parts:
        node.files.add(parts[-1])


def _render(node: _Dir, indent: str, lines: List[str]) -> None:
    entries = node.entries()
    for index, (name, is_dir) in enumerate(entries):
        last = index == len(entries) - 1
        connector = "└── " if last else "├── "
        lines.append(f"{indent}{connector}{name}{'/' if is_dir else ''}")
        if is_dir:
            _render(node.dirs[name], indent + ("    " if last else "│   "), lines)


def truncate_tree(tree: str, max_lines: int) -> str:
    """Cap a rendered tree to ``max_lines`` lines with an omission marker."""
    lines = tree.rstrip("\n").split("\n")
    if len(lines) <= max_lines:
        return tree
    omitted = len(lines) - max_lines
    kept = lines[:max_lines]
    kept.append(f"... ({omitted} more entries omitted)")
    return "\n".join(kept) + "\n"


__all__ = ["EMPTY_TREE", "render_tree", "truncate_tree"]

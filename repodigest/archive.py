"""Archive loading and acquisition helpers.

The ingestion pipeline only ever sees a :data:`~repodigest.models.FileMap`.
This module turns a zip snapshot into one, and provides the small download
helper used by callers that fetch GitHub branch archives themselves.
"""

from __future__ import annotations

import io
import re
import stat
import zipfile
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import Callable, Dict, Optional, Sequence, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from .errors import ArchiveError
from .logging import get_logger
from .models import FileMap

DEFAULT_BRANCHES: tuple[str, ...] = ("main", "master")
ARCHIVE_URL = "https://github.com/{owner}/{repo}/archive/refs/heads/{branch}.zip"
USER_AGENT = "repodigest"

_GITHUB_PATTERNS = (
    re.compile(r"github\.com/([^/]+)/([^/]+)$"),
    re.compile(r"github\.com:([^/]+)/([^/]+)$"),
)

logger = get_logger("archive")


def load_file_map(
    source: bytes | Path | str,
    *,
    max_entries: int = 50_000,
    max_total_bytes: int = 512 * 1024 * 1024,
) -> FileMap:
    """Extract a zip archive into a read-only ``path -> bytes`` mapping."""
    if isinstance(source, (bytes, bytearray)):
        handle = io.BytesIO(source)
        label = "<bytes>"
    else:
        path = Path(source).expanduser()
        if not path.exists():
            raise ArchiveError(f"Archive not found: {source}")
        handle = path.open("rb")
        label = str(path)

    try:
        with handle, zipfile.ZipFile(handle) as archive:
            files = _extract_members(archive, max_entries=max_entries, max_total_bytes=max_total_bytes)
    except zipfile.BadZipFile as exc:
        raise ArchiveError(f"Corrupt archive {label}: {exc}") from exc
    except OSError as exc:
        raise ArchiveError(f"Failed to read archive {label}: {exc}") from exc

    logger.debug("Loaded %d files from %s", len(files), label)
    return MappingProxyType(dict(sorted(files.items())))


def _extract_members(
    archive: zipfile.ZipFile, *, max_entries: int, max_total_bytes: int
) -> Dict[str, bytes]:
    members = archive.infolist()
    if len(members) > max_entries:
        raise ArchiveError(f"Too many entries in archive: {len(members)} (max: {max_entries})")

    declared = sum(info.file_size for info in members)
    if declared > max_total_bytes:
        raise ArchiveError(
            f"Archive too large when extracted: {declared} bytes (max: {max_total_bytes})"
        )

    files: Dict[str, bytes] = {}
    for info in members:
        if info.is_dir() or _is_symlink(info):
            continue
        name = _safe_member_name(info.filename)
        if name is None:
            logger.warning("Skipping unsafe archive member %s", info.filename)
            continue
        files[name] = archive.read(info)
    return files


def _is_symlink(info: zipfile.ZipInfo) -> bool:
    mode = info.external_attr >> 16
    return stat.S_ISLNK(mode)


def _safe_member_name(raw: str) -> Optional[str]:
    name = raw.replace("\\", "/")
    if name.startswith("/") or re.match(r"^[A-Za-z]:", name):
        return None
    parts = PurePosixPath(name).parts
    if not parts or ".." in parts:
        return None
    return "/".join(part for part in parts if part != ".")


def find_readme(file_map: FileMap) -> Optional[str]:
    """Return the decoded README closest to the archive root, if any."""
    candidates = sorted(file_map, key=lambda path: (path.count("/"), path))
    for path in candidates:
        lower = path.lower()
        if lower == "readme.md" or lower.endswith("/readme.md"):
            return file_map[path].decode("utf-8", errors="replace")
    for path in candidates:
        name = path.rsplit("/", 1)[-1].lower()
        if "readme" in name and name.endswith((".md", ".txt")):
            return file_map[path].decode("utf-8", errors="replace")
    return None


def parse_github_url(url: str) -> Tuple[str, str]:
    """Return ``(owner, repo)`` for https or ssh GitHub URLs."""
    normalised = re.sub(r"\.git$", "", url.strip()).rstrip("/")
    for pattern in _GITHUB_PATTERNS:
        match = pattern.search(normalised)
        if match:
            return match.group(1), match.group(2)
    raise ArchiveError(f"Invalid GitHub repository URL: {url}")


def download_archive(
    owner: str,
    repo: str,
    *,
    branches: Sequence[str] = DEFAULT_BRANCHES,
    timeout: float = 60.0,
    opener: Callable[..., object] = urlopen,
) -> bytes:
    """Download a branch archive, trying the next branch only on HTTP 404."""
    if not branches:
        raise ArchiveError("At least one branch name is required")

    last_error: Optional[HTTPError] = None
    for branch in branches:
        url = ARCHIVE_URL.format(owner=quote(owner), repo=quote(repo), branch=quote(branch))
        request = Request(url, headers={"User-Agent": USER_AGENT})
        try:
            with opener(request, timeout=timeout) as response:  # type: ignore[attr-defined]
                payload = response.read()
        except HTTPError as exc:
            if exc.code == 404:
                logger.info("Branch %s not found for %s/%s", branch, owner, repo)
                last_error = exc
                continue
            raise ArchiveError(f"Failed to download repository: HTTP {exc.code} {exc.reason}") from exc
        except URLError as exc:
            raise ArchiveError(f"Failed to download repository: {exc.reason}") from exc
        logger.info("Downloaded %s/%s@%s (%d bytes)", owner, repo, branch, len(payload))
        return payload

    tried = ", ".join(branches)
    raise ArchiveError(f"Repository {owner}/{repo} not found on branches: {tried}") from last_error


__all__ = [
    "ARCHIVE_URL",
    "DEFAULT_BRANCHES",
    "download_archive",
    "find_readme",
    "load_file_map",
    "parse_github_url",
]

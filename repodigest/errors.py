"""Exception types raised by repodigest components."""

from __future__ import annotations


class RepoDigestError(RuntimeError):
    """Base class for repodigest failures surfaced to callers."""


class ArchiveError(RepoDigestError):
    """Raised when an archive is missing, corrupt, or exceeds configured limits."""


class ConfigError(RepoDigestError):
    """Raised when the configuration file cannot be parsed."""


__all__ = ["ArchiveError", "ConfigError", "RepoDigestError"]

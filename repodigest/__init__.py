"""Code-intelligence digests for repository archives."""

from .archive import load_file_map
from .config import DigestConfig, load_config
from .digest import generate_digest, render_digest
from .pipeline import IngestionPipeline

__version__ = "0.1.0"

__all__ = [
    "DigestConfig",
    "IngestionPipeline",
    "generate_digest",
    "load_config",
    "load_file_map",
    "render_digest",
]

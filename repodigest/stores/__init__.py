"""Run caching and snapshot persistence."""

from .run_cache import RunCache
from .snapshot import load_snapshot, result_from_dict, result_to_dict, save_snapshot

__all__ = ["RunCache", "load_snapshot", "result_from_dict", "result_to_dict", "save_snapshot"]

"""In-process cache of ingestion results keyed by run identity."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import List, Optional

from ..models import IngestionResult


class RunCache:
    """Bounded LRU of recent ingestion results with explicit invalidation."""

    def __init__(self, max_entries: int = 8) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._entries: "OrderedDict[str, IngestionResult]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, run_id: object) -> bool:
        with self._lock:
            return run_id in self._entries

    def get(self, run_id: str) -> Optional[IngestionResult]:
        with self._lock:
            result = self._entries.get(run_id)
            if result is not None:
                self._entries.move_to_end(run_id)
            return result

    def put(self, result: IngestionResult) -> None:
        with self._lock:
            self._entries[result.run_id] = result
            self._entries.move_to_end(result.run_id)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def latest(self) -> Optional[IngestionResult]:
        """Return the most recently stored or accessed result."""
        with self._lock:
            if not self._entries:
                return None
            return next(reversed(self._entries.values()))

    def run_ids(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def invalidate(self, run_id: str) -> bool:
        with self._lock:
            return self._entries.pop(run_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


__all__ = ["RunCache"]

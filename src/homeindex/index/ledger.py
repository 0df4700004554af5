"""In-memory record of file paths that are already indexed."""

from __future__ import annotations

import threading
from typing import Iterable


class DedupLedger:
    """Thread-safe set of indexed file paths.

    Nothing is persisted; the ledger is rebuilt from the store on startup.
    """

    def __init__(self) -> None:
        self._paths: set[str] = set()
        self._lock = threading.Lock()

    def seed(self, paths: Iterable[str]) -> None:
        with self._lock:
            self._paths.update(str(path) for path in paths if path)

    def contains(self, path: str) -> bool:
        with self._lock:
            return str(path) in self._paths

    def record(self, path: str) -> None:
        with self._lock:
            self._paths.add(str(path))

    def __contains__(self, path: object) -> bool:
        return self.contains(str(path))

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)

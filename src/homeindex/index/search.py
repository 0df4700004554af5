"""Keyword search interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from homeindex.index.storage import SQLiteStore
from homeindex.utils.text import make_snippet


@dataclass(slots=True)
class SearchResult:
    kind: str
    id: int
    title: str
    file_path: str
    snippet: str


class Searcher:
    """Substring search over indexed documents and images."""

    def __init__(self, store: SQLiteStore) -> None:
        self.store = store

    def search(self, query: str, *, limit: int = 10) -> List[SearchResult]:
        query = query.strip()
        if not query:
            return []
        rows = self.store.search(query, limit=limit)
        return [
            SearchResult(
                kind=row["kind"],
                id=row["id"],
                title=row["title"] or "",
                file_path=row["file_path"],
                snippet=make_snippet(row["text"] or "", query),
            )
            for row in rows
        ]

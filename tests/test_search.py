"""Tests for keyword search."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from homeindex.index.search import SearchResult, Searcher
from homeindex.index.storage import SQLiteStore
from homeindex.models import DocumentRecord, ImageRecord


class TestSearcher:
    """Test Searcher against a real store."""

    def test_blank_query_does_not_hit_store(self) -> None:
        """Should return no results for an empty query."""
        store = MagicMock()

        assert Searcher(store).search("   ") == []
        store.search.assert_not_called()

    def test_documents_and_images(self, tmp_path: Path) -> None:
        store = SQLiteStore(tmp_path / "s.db")
        store.add_document(
            DocumentRecord(
                title="Lease",
                content="The tenant pays rent monthly.",
                file_path="/docs/lease.txt",
                file_type=".txt",
                metadata={},
            )
        )
        store.add_image(
            ImageRecord(
                filename="receipt.png",
                extracted_text="RENT RECEIPT",
                file_path="/img/receipt.png",
                dimensions=None,
                format="png",
                metadata={},
            )
        )

        results = Searcher(store).search(" rent ")
        store.close()

        assert {r.kind for r in results} == {"document", "image"}
        by_kind = {r.kind: r for r in results}
        assert by_kind["document"] == SearchResult(
            kind="document",
            id=1,
            title="Lease",
            file_path="/docs/lease.txt",
            snippet="The tenant pays rent monthly.",
        )
        assert by_kind["image"].title == "receipt.png"

    def test_limit_is_passed_through(self) -> None:
        store = MagicMock()
        store.search.return_value = []

        Searcher(store).search("q", limit=3)

        store.search.assert_called_once_with("q", limit=3)

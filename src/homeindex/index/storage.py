"""SQLite document and image store."""

from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from homeindex.models import DocumentRecord, ImageRecord, utc_now


class SQLiteStore:
    """Append-only persistence for documents and images.

    The store does not enforce unique file paths; deduplication is the
    ledger's job.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id INTEGER PRIMARY KEY,
                    title TEXT,
                    content TEXT NOT NULL,
                    file_path TEXT NOT NULL,
                    file_type TEXT,
                    metadata TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS images (
                    id INTEGER PRIMARY KEY,
                    filename TEXT NOT NULL,
                    extracted_text TEXT NOT NULL DEFAULT '',
                    file_path TEXT NOT NULL,
                    width INTEGER,
                    height INTEGER,
                    format TEXT,
                    metadata TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_documents_file_path ON documents(file_path)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_images_file_path ON images(file_path)")

    def add_document(self, record: DocumentRecord) -> int:
        if not record.content.strip():
            raise ValueError("Document content must not be empty")
        created_at = record.created_at or utc_now()
        with self.transaction() as conn:
            doc_id = conn.execute(
                """
                INSERT INTO documents(title, content, file_path, file_type, metadata, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    record.title,
                    record.content,
                    record.file_path,
                    record.file_type,
                    json.dumps(record.metadata, ensure_ascii=True, default=str),
                    created_at,
                ),
            ).lastrowid
        record.id = doc_id
        record.created_at = created_at
        return doc_id

    def add_image(self, record: ImageRecord) -> int:
        dimensions = record.dimensions or {}
        created_at = record.created_at or utc_now()
        with self.transaction() as conn:
            image_id = conn.execute(
                """
                INSERT INTO images(filename, extracted_text, file_path, width, height, format, metadata, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.filename,
                    record.extracted_text or "",
                    record.file_path,
                    dimensions.get("width"),
                    dimensions.get("height"),
                    record.format,
                    json.dumps(record.metadata, ensure_ascii=True, default=str),
                    created_at,
                ),
            ).lastrowid
        record.id = image_id
        record.created_at = created_at
        return image_id

    def get_all_documents(self, limit: int = 100, offset: int = 0) -> List[DocumentRecord]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM documents ORDER BY id LIMIT ? OFFSET ?", (limit, offset)
            ).fetchall()
        return [self._document_from_row(row) for row in rows]

    def get_all_images(self, limit: int = 100, offset: int = 0) -> List[ImageRecord]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM images ORDER BY id LIMIT ? OFFSET ?", (limit, offset)
            ).fetchall()
        return [self._image_from_row(row) for row in rows]

    def count_documents(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]

    def count_images(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM images").fetchone()[0]

    def search(self, query: str, *, limit: int = 10) -> List[dict]:
        """Case-insensitive substring match over documents and images."""
        pattern = "%" + query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
        with self._lock:
            rows = self._conn.execute(
                """
                SELECT 'document' AS kind, id, title, file_path, content AS text, created_at
                FROM documents
                WHERE title LIKE :p ESCAPE '\\' OR content LIKE :p ESCAPE '\\'
                UNION ALL
                SELECT 'image' AS kind, id, filename AS title, file_path, extracted_text AS text, created_at
                FROM images
                WHERE filename LIKE :p ESCAPE '\\' OR extracted_text LIKE :p ESCAPE '\\'
                ORDER BY created_at DESC
                LIMIT :limit
                """,
                {"p": pattern, "limit": limit},
            ).fetchall()
        return [dict(row) for row in rows]

    @staticmethod
    def _document_from_row(row: sqlite3.Row) -> DocumentRecord:
        return DocumentRecord(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            file_path=row["file_path"],
            file_type=row["file_type"],
            metadata=json.loads(row["metadata"]) if row["metadata"] else {},
            created_at=row["created_at"],
        )

    @staticmethod
    def _image_from_row(row: sqlite3.Row) -> ImageRecord:
        dimensions = None
        if row["width"] is not None and row["height"] is not None:
            dimensions = {"width": row["width"], "height": row["height"]}
        return ImageRecord(
            id=row["id"],
            filename=row["filename"],
            extracted_text=row["extracted_text"],
            file_path=row["file_path"],
            dimensions=dimensions,
            format=row["format"],
            metadata=json.loads(row["metadata"]) if row["metadata"] else {},
            created_at=row["created_at"],
        )

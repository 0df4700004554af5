"""Core HomeIndex data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


class SourceStrategy(str, Enum):
    """How the text of a file was obtained."""

    DIRECT_READ = "direct-read"
    PDF_EXTRACT = "pdf-extract"
    OCR = "ocr"


@dataclass(slots=True)
class FileRecord:
    """A candidate file found by the scanner."""

    path: Path
    extension: str
    size: int
    created: float
    modified: float


@dataclass(slots=True)
class ExtractionResult:
    """Text extracted from a single file."""

    text: str
    unit_count: int
    source_strategy: SourceStrategy
    provider_metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


@dataclass(slots=True)
class OcrResult:
    text: str
    unit_count: int
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class DocumentInput:
    """Input for manual ingestion: inline content or a file reference."""

    title: str | None = None
    content: str | None = None
    file_path: str | None = None
    file_type: str | None = None


@dataclass(slots=True)
class DocumentRecord:
    """Document persisted in the store. ``file_path`` is the dedup key."""

    title: str
    content: str
    file_path: str
    file_type: str
    metadata: Dict[str, Any]
    id: int | None = None
    created_at: str | None = None


@dataclass(slots=True)
class ImageData:
    """Image inspected on disk, ready to be persisted."""

    path: Path
    filename: str
    size: int = 0
    dimensions: Dict[str, int] | None = None
    format: str | None = None
    extracted_text: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ImageRecord:
    """Image persisted in the store. ``extracted_text`` may be empty."""

    filename: str
    extracted_text: str
    file_path: str
    dimensions: Dict[str, int] | None
    format: str | None
    metadata: Dict[str, Any]
    id: int | None = None
    created_at: str | None = None


@dataclass(slots=True)
class IngestResult:
    """Outcome of a manual ingestion call.

    ``success=False`` is a soft failure such as an empty file, not an error.
    """

    success: bool
    id: int | None = None
    reason: str | None = None
    content: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ScanError:
    error: str
    file: str | None = None
    directory: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"error": self.error}
        if self.file is not None:
            data["file"] = self.file
        if self.directory is not None:
            data["directory"] = self.directory
        return data


@dataclass(slots=True)
class ScanGroup:
    """Files found under one root, album, or library."""

    name: str
    files: List[FileRecord] = field(default_factory=list)
    errors: List[ScanError] = field(default_factory=list)


@dataclass(slots=True)
class ScanRun:
    """Counters for one category of a bulk scan."""

    scanned: int = 0
    processed: int = 0
    skipped: int = 0
    errors: List[ScanError] = field(default_factory=list)
    new_files: List[str] = field(default_factory=list)

    def add_error(self, error: Exception | str, *, file: str | None = None, directory: str | None = None) -> None:
        self.errors.append(ScanError(error=str(error), file=file, directory=directory))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scanned": self.scanned,
            "processed": self.processed,
            "skipped": self.skipped,
            "errors": [err.to_dict() for err in self.errors],
            "newFiles": list(self.new_files),
        }


@dataclass(slots=True)
class ScanResult:
    started_at: str
    documents: ScanRun = field(default_factory=ScanRun)
    images: ScanRun = field(default_factory=ScanRun)
    finished_at: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documents": self.documents.to_dict(),
            "images": self.images.to_dict(),
            "startTime": self.started_at,
            "endTime": self.finished_at,
        }


@dataclass(slots=True)
class IndexStats:
    total_documents: int
    total_images: int
    processed_file_count: int
    is_scanning: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalDocuments": self.total_documents,
            "totalImages": self.total_images,
            "processedFiles": self.processed_file_count,
            "isScanning": self.is_scanning,
        }

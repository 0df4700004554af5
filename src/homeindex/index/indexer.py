"""Document and image ingestion pipeline."""

from __future__ import annotations

import enum
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from homeindex.config import IMAGE_EXTENSIONS, AppConfig
from homeindex.errors import InvalidInputError
from homeindex.index.ledger import DedupLedger
from homeindex.index.scanner import FilesystemScanner
from homeindex.index.storage import SQLiteStore
from homeindex.ingestion.extractors import ExtractionResolver
from homeindex.ingestion.images import inspect_image
from homeindex.ingestion.ocr import AzureReadOcr
from homeindex.models import (
    DocumentInput,
    DocumentRecord,
    ImageData,
    ImageRecord,
    IndexStats,
    IngestResult,
    ScanGroup,
    ScanResult,
    ScanRun,
    utc_now,
)

LOGGER = logging.getLogger(__name__)

SOURCE = "document-service"
UPLOADED_PLACEHOLDER = "uploaded-content"
NO_CONTENT = "No content extracted"


class ScanState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


class ScanGuard:
    """Lock-guarded scan state allowing a single bulk scan at a time."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = ScanState.IDLE

    @property
    def state(self) -> ScanState:
        with self._lock:
            return self._state

    def try_begin(self) -> bool:
        with self._lock:
            if self._state is ScanState.RUNNING:
                return False
            self._state = ScanState.RUNNING
            return True

    def end(self) -> None:
        with self._lock:
            self._state = ScanState.IDLE

    @contextmanager
    def hold(self) -> Iterator[bool]:
        """Yield whether the scan slot was acquired; release it on exit."""
        acquired = self.try_begin()
        try:
            yield acquired
        finally:
            if acquired:
                self.end()


class Indexer:
    """Coordinates scanning, extraction, deduplication and persistence."""

    def __init__(
        self,
        store: SQLiteStore,
        resolver: ExtractionResolver,
        scanner: FilesystemScanner,
        *,
        ledger: DedupLedger | None = None,
        seed_page_size: int = 100,
    ) -> None:
        if seed_page_size <= 0:
            raise ValueError("seed_page_size must be positive")
        self.store = store
        self.resolver = resolver
        self.scanner = scanner
        self.ledger = ledger if ledger is not None else DedupLedger()
        self.seed_page_size = seed_page_size
        self.scan_guard = ScanGuard()

    @classmethod
    def from_config(cls, config: AppConfig, *, store: SQLiteStore | None = None) -> "Indexer":
        """Build an indexer and seed its ledger from the store.

        Store failures while seeding propagate: the indexer is not usable
        without knowing what is already indexed.
        """
        if store is None:
            db_path = config.resolve_db_path(Path.cwd())
            db_path.parent.mkdir(parents=True, exist_ok=True)
            store = SQLiteStore(db_path)
        ocr = AzureReadOcr.from_config(config) if config.ocr_configured else None
        if ocr is None:
            LOGGER.warning("Azure Computer Vision credentials not configured, OCR disabled")
        indexer = cls(
            store,
            ExtractionResolver(ocr),
            FilesystemScanner.from_config(config),
            seed_page_size=config.seed_page_size,
        )
        indexer.load_ledger()
        return indexer

    @property
    def is_scanning(self) -> bool:
        return self.scan_guard.state is ScanState.RUNNING

    def load_ledger(self) -> int:
        """Seed the ledger with every file path known to the store."""
        self.ledger.seed(self._iter_known_paths())
        LOGGER.info("Loaded %s previously processed files", len(self.ledger))
        return len(self.ledger)

    def _iter_known_paths(self) -> Iterator[str]:
        for fetch in (self.store.get_all_documents, self.store.get_all_images):
            offset = 0
            while True:
                page = fetch(limit=self.seed_page_size, offset=offset)
                for record in page:
                    if record.file_path:
                        yield record.file_path
                if not page or len(page) < self.seed_page_size:
                    break
                offset += len(page)

    def ingest_one(self, document: DocumentInput) -> IngestResult:
        """Persist inline content, or extract and persist a file.

        Returns a non-success result when no text could be extracted.
        """
        content = document.content
        title = document.title
        file_path = document.file_path
        extraction = None

        if content and content.strip():
            title = title or file_path or "Untitled Document"
            file_path = file_path or UPLOADED_PLACEHOLDER
        elif file_path:
            path = Path(file_path)
            if not path.exists():
                raise FileNotFoundError(f"File not found: {file_path}")
            title = title or path.stem
            extraction = self.resolver.extract(path)
            content = extraction.text
        else:
            raise InvalidInputError("Either content or valid filePath must be provided")

        if not content or not content.strip():
            LOGGER.warning("No content extracted from %s", file_path)
            return IngestResult(success=False, reason=NO_CONTENT)

        path = Path(file_path)
        file_size = path.stat().st_size if path.is_file() else len(content.encode("utf-8"))
        metadata = {"fileSize": file_size, "processedAt": utc_now(), "source": SOURCE}
        if extraction is not None:
            metadata["extraction"] = extraction.source_strategy.value
            metadata["units"] = extraction.unit_count

        record = DocumentRecord(
            title=title,
            content=content,
            file_path=file_path,
            file_type=document.file_type or path.suffix.lower(),
            metadata=metadata,
        )
        doc_id = self.store.add_document(record)
        if file_path != UPLOADED_PLACEHOLDER:
            self.ledger.record(file_path)
        LOGGER.info("Successfully ingested document: %s", title)
        return IngestResult(success=True, id=doc_id, content=content)

    def inspect_image(self, path: Path) -> ImageData:
        """Read image properties and OCR text; OCR failures are recorded, not raised."""
        return inspect_image(Path(path), self.resolver)

    def ingest_image(self, image: ImageData) -> IngestResult:
        """Persist an image record, with or without extracted text."""
        record = ImageRecord(
            filename=image.filename,
            extracted_text=image.extracted_text or "",
            file_path=str(image.path),
            dimensions=image.dimensions,
            format=image.format,
            metadata={
                **image.metadata,
                "fileSize": image.size,
                "processedAt": utc_now(),
                "source": SOURCE,
            },
        )
        image_id = self.store.add_image(record)
        self.ledger.record(record.file_path)
        LOGGER.info("Successfully ingested image: %s", image.filename)
        return IngestResult(success=True, id=image_id)

    def ingest_path(self, path: Path, *, title: str | None = None) -> IngestResult:
        """Manually ingest a file, routing images to the image path."""
        path = Path(path)
        if path.suffix.lower() in IMAGE_EXTENSIONS:
            if not path.exists():
                raise FileNotFoundError(f"File not found: {path}")
            return self.ingest_image(self.inspect_image(path))
        return self.ingest_one(DocumentInput(title=title, file_path=str(path)))

    def scan_and_ingest_all(self) -> ScanResult | None:
        """Run one bulk scan over documents and images.

        Returns ``None`` without doing anything when a scan is already running.
        """
        with self.scan_guard.hold() as acquired:
            if not acquired:
                LOGGER.info("Already processing documents, skipping...")
                return None
            try:
                return self._run_scan()
            except Exception:
                LOGGER.exception("Error during scan and ingest")
                raise

    def _run_scan(self) -> ScanResult:
        LOGGER.info("Starting comprehensive document and image scan...")
        result = ScanResult(started_at=utc_now())
        result.documents = self.scan_documents()
        result.images = self.scan_images()
        result.finished_at = utc_now()
        LOGGER.info(
            "Scan completed: %s documents and %s images processed",
            result.documents.processed,
            result.images.processed,
        )
        return result

    def scan_documents(self) -> ScanRun:
        run = ScanRun()
        for group in self.scanner.scan_documents():
            self._collect_errors(run, group)
            for record in group.files:
                self._ingest_candidate(run, str(record.path), self._ingest_document_file)
        return run

    def scan_images(self) -> ScanRun:
        run = ScanRun()
        for group in self.scanner.scan_images():
            LOGGER.debug("Image group %s: %s files", group.name, len(group.files))
            self._collect_errors(run, group)
            for record in group.files:
                self._ingest_candidate(run, str(record.path), self._ingest_image_file)
        return run

    def _ingest_document_file(self, path: str) -> IngestResult:
        return self.ingest_one(DocumentInput(file_path=path))

    def _ingest_image_file(self, path: str) -> IngestResult:
        return self.ingest_image(self.inspect_image(Path(path)))

    def _ingest_candidate(self, run: ScanRun, path: str, ingest: Callable[[str], IngestResult]) -> None:
        run.scanned += 1
        if self.ledger.contains(path):
            return
        try:
            result = ingest(path)
        except Exception as exc:
            LOGGER.error("Error processing %s: %s", path, exc)
            run.add_error(exc, file=path)
            return
        if not result.success:
            run.skipped += 1
            return
        run.processed += 1
        run.new_files.append(path)
        self.ledger.record(path)

    @staticmethod
    def _collect_errors(run: ScanRun, group: ScanGroup) -> None:
        run.errors.extend(group.errors)

    def get_stats(self) -> IndexStats:
        return IndexStats(
            total_documents=self.store.count_documents(),
            total_images=self.store.count_images(),
            processed_file_count=len(self.ledger),
            is_scanning=self.is_scanning,
        )

    def close(self) -> None:
        self.store.close()
        ocr = self.resolver.ocr
        if isinstance(ocr, AzureReadOcr):
            ocr.close()


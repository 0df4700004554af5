"""Choose and run a text extraction strategy for a file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict

from homeindex.config import IMAGE_EXTENSIONS, TEXT_EXTENSIONS
from homeindex.errors import OcrUnavailableError, PdfExtractionError, UnsupportedTypeError
from homeindex.ingestion.ocr import OcrProvider
from homeindex.ingestion.pdf_loader import PdfText, extract_pdf_text
from homeindex.models import ExtractionResult, SourceStrategy
from homeindex.utils.files import normalize_extension

LOGGER = logging.getLogger(__name__)

STRATEGIES: Dict[str, SourceStrategy] = {
    **{ext: SourceStrategy.DIRECT_READ for ext in TEXT_EXTENSIONS},
    ".pdf": SourceStrategy.PDF_EXTRACT,
    **{ext: SourceStrategy.OCR for ext in IMAGE_EXTENSIONS},
}


def strategy_for(extension: str) -> SourceStrategy:
    """Look up the strategy for an extension or raise :class:`UnsupportedTypeError`."""
    ext = normalize_extension(extension)
    try:
        return STRATEGIES[ext]
    except KeyError:
        raise UnsupportedTypeError(ext) from None


class ExtractionResolver:
    """Dispatch files to direct read, PDF text extraction, or OCR."""

    def __init__(
        self,
        ocr: OcrProvider | None = None,
        *,
        pdf_extractor: Callable[[bytes], PdfText] = extract_pdf_text,
    ) -> None:
        self.ocr = ocr
        self.pdf_extractor = pdf_extractor

    @property
    def ocr_available(self) -> bool:
        return self.ocr is not None and self.ocr.is_configured

    def extract(self, path: Path, extension: str | None = None) -> ExtractionResult:
        path = Path(path)
        strategy = strategy_for(extension if extension else path.suffix)
        if strategy is SourceStrategy.DIRECT_READ:
            return self._read_text(path)
        if strategy is SourceStrategy.PDF_EXTRACT:
            return self._extract_pdf(path)
        return self._recognize(path)

    def _read_text(self, path: Path) -> ExtractionResult:
        # bytes are decoded as-is so line endings survive untouched
        text = path.read_bytes().decode("utf-8", errors="replace")
        return ExtractionResult(text=text, unit_count=1, source_strategy=SourceStrategy.DIRECT_READ)

    def _extract_pdf(self, path: Path) -> ExtractionResult:
        data = path.read_bytes()
        LOGGER.info("Extracting text from PDF: %s", path)
        try:
            pdf = self.pdf_extractor(data)
            if not pdf.text.strip():
                raise PdfExtractionError(f"No text layer found in {path.name}")
        except PdfExtractionError as exc:
            if not self.ocr_available:
                LOGGER.error("No OCR available, PDF processing failed for %s: %s", path, exc)
                raise
            LOGGER.info("Falling back to OCR for PDF %s (%s)", path, exc)
            result = self._run_ocr(data)
            result.provider_metadata["fallbackReason"] = str(exc)
            return result

        return ExtractionResult(
            text=pdf.text,
            unit_count=pdf.page_count,
            source_strategy=SourceStrategy.PDF_EXTRACT,
            provider_metadata={**pdf.metadata, "source": "pymupdf", "charCount": len(pdf.text)},
        )

    def _recognize(self, path: Path) -> ExtractionResult:
        result = self._run_ocr(path.read_bytes())
        result.provider_metadata["imageType"] = path.suffix.lower()
        return result

    def _run_ocr(self, data: bytes) -> ExtractionResult:
        if self.ocr is None:
            raise OcrUnavailableError()
        ocr = self.ocr.recognize(data)
        return ExtractionResult(
            text=ocr.text,
            unit_count=ocr.unit_count,
            source_strategy=SourceStrategy.OCR,
            provider_metadata={"source": "azure-ocr"},
        )

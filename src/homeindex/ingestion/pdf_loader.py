"""PDF text extraction.

Uses PyMuPDF (fitz) to read the text layer of a PDF. Scanned PDFs without a
text layer come back empty and are handed to OCR by the resolver.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator

import fitz  # PyMuPDF

from homeindex.errors import PdfExtractionError
from homeindex.utils.text import normalize_whitespace

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PdfText:
    text: str
    page_count: int
    metadata: Dict[str, str] = field(default_factory=dict)


def _open(data: bytes) -> "fitz.Document":
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise PdfExtractionError(f"Failed to open PDF: {exc}") from exc
    if doc.needs_pass:
        doc.close()
        raise PdfExtractionError("PDF is encrypted")
    return doc


def iter_text_parts(doc: "fitz.Document") -> Iterator[str]:
    """Yield normalised text page by page."""
    for index in range(len(doc)):
        try:
            text = doc[index].get_text() or ""
        except Exception as exc:  # pragma: no cover - corrupt page
            LOGGER.warning("Failed to read page %s: %s", index, exc)
            continue
        normalized = normalize_whitespace(text.splitlines())
        if normalized:
            yield normalized


def extract_pdf_text(data: bytes) -> PdfText:
    """Extract the text layer of an in-memory PDF.

    Raises :class:`PdfExtractionError` for corrupt or encrypted input. An
    empty text layer is returned as empty text.
    """
    doc = _open(data)
    try:
        text = "\n".join(iter_text_parts(doc))
        metadata = {key: value for key, value in (doc.metadata or {}).items() if value}
        page_count = len(doc)
    finally:
        doc.close()

    LOGGER.debug("PDF parsed: %s pages, %s characters", page_count, len(text))
    return PdfText(text=text, page_count=page_count, metadata=metadata)


"""Inspect image files: size, dimensions, format and OCR text."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from homeindex.errors import OcrError
from homeindex.ingestion.extractors import ExtractionResolver
from homeindex.models import ImageData

LOGGER = logging.getLogger(__name__)


def _timestamp(value: float) -> str:
    return datetime.fromtimestamp(value, tz=timezone.utc).isoformat()


def read_image_properties(path: Path) -> tuple[dict[str, int], str]:
    """Return ``({"width", "height"}, format)`` read with Pillow."""
    with Image.open(path) as image:
        width, height = image.size
        fmt = (image.format or path.suffix.lstrip(".")).lower()
    return {"width": width, "height": height}, fmt


def inspect_image(path: Path, resolver: ExtractionResolver) -> ImageData:
    """Build :class:`ImageData` for ``path``.

    OCR problems are recorded in ``metadata["ocrError"]`` and leave the text
    empty; an image without text is still worth indexing.
    """
    path = Path(path)
    stat = path.stat()
    data = ImageData(
        path=path,
        filename=path.name,
        size=stat.st_size,
        format=path.suffix.lstrip(".").lower() or None,
        metadata={
            "created": _timestamp(getattr(stat, "st_birthtime", stat.st_ctime)),
            "modified": _timestamp(stat.st_mtime),
        },
    )

    try:
        data.dimensions, data.format = read_image_properties(path)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        LOGGER.warning("Cannot read image properties of %s: %s", path, exc)
        data.metadata["imageError"] = str(exc)

    try:
        result = resolver.extract(path)
    except OcrError as exc:
        LOGGER.warning("OCR failed for %s: %s", path, exc)
        data.metadata["ocrError"] = str(exc)
    else:
        data.extracted_text = result.text
        data.metadata["ocr"] = result.provider_metadata

    return data

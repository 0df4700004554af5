"""Tests for image inspection."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from PIL import Image

from homeindex.errors import OcrJobFailedError, OcrTimeoutError
from homeindex.ingestion.extractors import ExtractionResolver
from homeindex.ingestion.images import inspect_image, read_image_properties


class TestReadImageProperties:
    def test_dimensions_and_format(self, tmp_path: Path, make_image) -> None:
        path = make_image(tmp_path / "wide.png", (64, 32))

        dimensions, fmt = read_image_properties(path)

        assert dimensions == {"width": 64, "height": 32}
        assert fmt == "png"


class TestInspectImage:
    def test_with_ocr_text(self, tmp_path: Path, make_image, fake_ocr) -> None:
        path = make_image(tmp_path / "sign.jpg")

        data = inspect_image(path, ExtractionResolver(fake_ocr("EXIT")))

        assert data.filename == "sign.jpg"
        assert data.size == path.stat().st_size
        assert data.dimensions == {"width": 40, "height": 20}
        assert data.format == "jpeg"
        assert data.extracted_text == "EXIT"
        assert "ocrError" not in data.metadata
        assert data.metadata["ocr"]["source"] == "azure-ocr"

    def test_ocr_failure_is_recorded(self, tmp_path: Path, make_image, fake_ocr) -> None:
        path = make_image(tmp_path / "photo.png")

        data = inspect_image(path, ExtractionResolver(fake_ocr(error=OcrJobFailedError("failed"))))

        assert data.extracted_text == ""
        assert data.metadata["ocrError"] == "OCR failed with status: failed"
        assert data.dimensions == {"width": 40, "height": 20}

    def test_ocr_not_configured_is_recorded(self, tmp_path: Path, make_image) -> None:
        path = make_image(tmp_path / "photo.png")

        data = inspect_image(path, ExtractionResolver())

        assert data.extracted_text == ""
        assert "not configured" in data.metadata["ocrError"]

    def test_ocr_timeout_is_recorded(self, tmp_path: Path, make_image, fake_ocr) -> None:
        path = make_image(tmp_path / "photo.png")

        data = inspect_image(path, ExtractionResolver(fake_ocr(error=OcrTimeoutError(3))))

        assert "3 polls" in data.metadata["ocrError"]

    def test_unreadable_image_keeps_extension_format(self, tmp_path: Path, fake_ocr) -> None:
        path = tmp_path / "corrupt.gif"
        path.write_bytes(b"not really a gif")

        data = inspect_image(path, ExtractionResolver(fake_ocr("")))

        assert data.dimensions is None
        assert data.format == "gif"
        assert "imageError" in data.metadata

    def test_decompression_bomb_is_recorded(self, tmp_path: Path, make_image, fake_ocr) -> None:
        """Oversized images are still indexed, without dimensions."""
        path = make_image(tmp_path / "panorama.png")

        with patch("homeindex.ingestion.images.Image.open", side_effect=Image.DecompressionBombError("too big")):
            data = inspect_image(path, ExtractionResolver(fake_ocr("VIEW")))

        assert data.dimensions is None
        assert data.format == "png"
        assert data.metadata["imageError"] == "too big"
        assert data.extracted_text == "VIEW"

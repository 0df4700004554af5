"""Shared fixtures for HomeIndex tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import fitz
import pytest
from PIL import Image

from homeindex.models import OcrResult


class FakeOcr:
    """OCR provider double returning canned text or raising an error."""

    def __init__(self, text: str = "ABC", *, error: Exception | None = None, configured: bool = True) -> None:
        self.text = text
        self.error = error
        self.configured = configured
        self.calls: list[bytes] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def recognize(self, data: bytes) -> OcrResult:
        self.calls.append(data)
        if self.error is not None:
            raise self.error
        return OcrResult(text=self.text, unit_count=1, raw={"readResults": [{}]})


@pytest.fixture
def fake_ocr() -> Callable[..., FakeOcr]:
    return FakeOcr


@pytest.fixture
def make_pdf() -> Callable[..., Path]:
    """Write a one-page PDF; ``text=None`` leaves the text layer empty."""

    def _make(path: Path, text: str | None = "Hello PDF") -> Path:
        doc = fitz.open()
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
        doc.save(path)
        doc.close()
        return path

    return _make


@pytest.fixture
def make_image() -> Callable[..., Path]:
    def _make(path: Path, size: tuple[int, int] = (40, 20)) -> Path:
        Image.new("RGB", size, "white").save(path)
        return path

    return _make

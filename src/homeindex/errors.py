"""Exceptions raised by the ingestion pipeline."""

from __future__ import annotations


class HomeIndexError(Exception):
    """Base class for HomeIndex errors."""


class InvalidInputError(HomeIndexError, ValueError):
    """Manual ingestion was called without content or a file path."""


class UnsupportedTypeError(HomeIndexError):
    """No extraction strategy exists for the file extension."""

    def __init__(self, extension: str) -> None:
        super().__init__(f"Unsupported file type: {extension or '<none>'}")
        self.extension = extension


class PdfExtractionError(HomeIndexError):
    """The PDF text layer could not be read or was empty."""


class OcrError(HomeIndexError):
    """Base class for OCR provider failures."""


class OcrUnavailableError(OcrError):
    """The OCR provider has no credentials configured."""

    def __init__(self, message: str = "OCR provider is not configured") -> None:
        super().__init__(message)


class OcrJobFailedError(OcrError):
    """The OCR job reached a terminal state other than ``succeeded``."""

    def __init__(self, status: str) -> None:
        super().__init__(f"OCR failed with status: {status}")
        self.status = status


class OcrTimeoutError(OcrError):
    """The OCR job did not finish within the allowed number of polls."""

    def __init__(self, polls: int) -> None:
        super().__init__(f"OCR job still running after {polls} polls")
        self.polls = polls


class OcrRequestError(OcrError):
    """Transport or HTTP level failure talking to the OCR provider."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

"""OCR through the Azure Computer Vision Read API.

The Read API is asynchronous: the image (or PDF) bytes are submitted, the
response carries an ``Operation-Location`` URL, and that URL is polled until
the job leaves the ``notStarted``/``running`` states.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Protocol

import httpx

from homeindex.config import AppConfig
from homeindex.errors import OcrJobFailedError, OcrRequestError, OcrTimeoutError, OcrUnavailableError
from homeindex.models import OcrResult

LOGGER = logging.getLogger(__name__)

READ_ANALYZE_PATH = "/vision/v3.2/read/analyze"
PENDING_STATUSES = frozenset({"notStarted", "running"})


class OcrProvider(Protocol):
    """Anything that turns image or PDF bytes into text."""

    @property
    def is_configured(self) -> bool: ...

    def recognize(self, data: bytes) -> OcrResult: ...


def collect_lines(analyze_result: Dict[str, Any]) -> tuple[str, int]:
    """Join recognised lines in document order and count pages."""
    pages = analyze_result.get("readResults") or []
    lines = [line.get("text", "") for page in pages for line in page.get("lines") or []]
    return "\n".join(lines), len(pages)


class AzureReadOcr:
    """Submit-then-poll client for the Read API."""

    def __init__(
        self,
        endpoint: str | None = None,
        key: str | None = None,
        *,
        poll_interval: float = 1.0,
        max_polls: int = 120,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.endpoint = endpoint.rstrip("/") if endpoint else None
        self.key = key
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.timeout = timeout
        self._client = client
        self._sleep = sleep
        if not self.is_configured:
            LOGGER.warning("Azure Computer Vision credentials not configured, OCR disabled")

    @classmethod
    def from_config(cls, config: AppConfig) -> "AzureReadOcr":
        return cls(
            config.ocr_endpoint,
            config.ocr_key,
            poll_interval=config.ocr_poll_interval,
            max_polls=config.ocr_max_polls,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.key)

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _headers(self) -> Dict[str, str]:
        return {"Ocp-Apim-Subscription-Key": self.key or ""}

    def submit(self, data: bytes) -> str:
        """Start a read job and return its operation URL."""
        url = f"{self.endpoint}{READ_ANALYZE_PATH}"
        try:
            response = self.client.post(
                url,
                content=data,
                headers={**self._headers(), "Content-Type": "application/octet-stream"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise OcrRequestError(
                f"OCR submission rejected: {exc.response.text[:200]}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise OcrRequestError(f"OCR submission failed: {exc}") from exc

        operation = response.headers.get("Operation-Location")
        if not operation:
            raise OcrRequestError("OCR response is missing the Operation-Location header")
        return operation

    def get_status(self, operation: str) -> Dict[str, Any]:
        try:
            response = self.client.get(operation, headers=self._headers())
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise OcrRequestError(
                f"OCR status check rejected: {exc.response.text[:200]}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise OcrRequestError(f"OCR status check failed: {exc}") from exc

    def wait(self, operation: str) -> Dict[str, Any]:
        """Poll ``operation`` until it reaches a terminal state."""
        for _ in range(self.max_polls):
            self._sleep(self.poll_interval)
            payload = self.get_status(operation)
            if payload.get("status") not in PENDING_STATUSES:
                return payload
        raise OcrTimeoutError(self.max_polls)

    def recognize(self, data: bytes) -> OcrResult:
        if not self.is_configured:
            raise OcrUnavailableError("Azure Computer Vision not configured")

        operation = self.submit(data)
        LOGGER.debug("OCR job submitted: %s", operation.rsplit("/", 1)[-1])
        payload = self.wait(operation)

        status = payload.get("status")
        if status != "succeeded":
            raise OcrJobFailedError(str(status))

        analyze_result = payload.get("analyzeResult") or {}
        text, unit_count = collect_lines(analyze_result)
        return OcrResult(text=text, unit_count=unit_count, raw=analyze_result)

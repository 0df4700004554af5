"""Tests for the Azure Read OCR adapter."""

from __future__ import annotations

import httpx
import pytest

from homeindex.config import AppConfig
from homeindex.errors import OcrJobFailedError, OcrRequestError, OcrTimeoutError, OcrUnavailableError
from homeindex.ingestion.ocr import AzureReadOcr, collect_lines

ENDPOINT = "https://vision.example.com/"
OPERATION = "https://vision.example.com/vision/v3.2/read/analyzeResults/op-123"

PAGES = [
    {"page": 1, "lines": [{"text": "first line"}, {"text": "second line"}]},
    {"page": 2, "lines": [{"text": "third line"}]},
]


def _client(statuses, *, pages=PAGES, submit_status=202, headers=None):
    calls = {"post": [], "get": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            calls["post"].append(request)
            return httpx.Response(
                submit_status,
                headers=headers if headers is not None else {"Operation-Location": OPERATION},
            )
        calls["get"] += 1
        status = statuses[min(calls["get"], len(statuses)) - 1]
        body = {"status": status}
        if status == "succeeded":
            body["analyzeResult"] = {"readResults": pages}
        return httpx.Response(200, json=body)

    return httpx.Client(transport=httpx.MockTransport(handler)), calls


def _ocr(client, **kwargs) -> AzureReadOcr:
    sleeps: list[float] = []
    ocr = AzureReadOcr(ENDPOINT, "secret", client=client, sleep=sleeps.append, **kwargs)
    ocr.sleeps = sleeps  # type: ignore[attr-defined]
    return ocr


class TestCollectLines:
    def test_joins_lines_across_pages(self) -> None:
        text, pages = collect_lines({"readResults": PAGES})
        assert text == "first line\nsecond line\nthird line"
        assert pages == 2

    def test_empty_result(self) -> None:
        assert collect_lines({}) == ("", 0)


class TestAzureReadOcr:
    def test_unconfigured_raises_unavailable(self) -> None:
        """No credentials fails immediately without touching the network."""
        client, calls = _client(["succeeded"])
        ocr = AzureReadOcr(None, None, client=client)

        assert not ocr.is_configured
        with pytest.raises(OcrUnavailableError):
            ocr.recognize(b"image")
        assert calls["post"] == []

    def test_from_config(self) -> None:
        config = AppConfig(ocr_endpoint=ENDPOINT, ocr_key="k", ocr_poll_interval=0.5, ocr_max_polls=3)
        ocr = AzureReadOcr.from_config(config)
        assert ocr.is_configured
        assert ocr.endpoint == "https://vision.example.com"
        assert ocr.poll_interval == 0.5
        assert ocr.max_polls == 3

    def test_recognize_polls_until_succeeded(self) -> None:
        client, calls = _client(["notStarted", "running", "succeeded"])
        ocr = _ocr(client)

        result = ocr.recognize(b"image-bytes")

        assert result.text == "first line\nsecond line\nthird line"
        assert result.unit_count == 2
        assert result.raw["readResults"] == PAGES
        assert calls["get"] == 3
        assert ocr.sleeps == [1.0, 1.0, 1.0]

    def test_submit_sends_key_and_body(self) -> None:
        client, calls = _client(["succeeded"])
        _ocr(client).recognize(b"payload")

        request = calls["post"][0]
        assert request.url == "https://vision.example.com/vision/v3.2/read/analyze"
        assert request.headers["Ocp-Apim-Subscription-Key"] == "secret"
        assert request.headers["Content-Type"] == "application/octet-stream"
        assert request.content == b"payload"

    def test_failed_status_raises_job_failed(self) -> None:
        client, _ = _client(["running", "failed"])

        with pytest.raises(OcrJobFailedError) as excinfo:
            _ocr(client).recognize(b"image")

        assert excinfo.value.status == "failed"

    def test_stuck_job_times_out(self) -> None:
        client, calls = _client(["running"])

        with pytest.raises(OcrTimeoutError):
            _ocr(client, max_polls=4).recognize(b"image")

        assert calls["get"] == 4

    def test_rejected_submission_raises_request_error(self) -> None:
        client, _ = _client(["succeeded"], submit_status=401)

        with pytest.raises(OcrRequestError) as excinfo:
            _ocr(client).recognize(b"image")

        assert excinfo.value.status_code == 401

    def test_missing_operation_location(self) -> None:
        client, _ = _client(["succeeded"], headers={})

        with pytest.raises(OcrRequestError):
            _ocr(client).recognize(b"image")

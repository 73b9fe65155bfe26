# tests/test_text_extraction.py
# Extraction client contract: multipart "file" in, {"text": str} out.

import asyncio

import httpx
import pytest

from shidduch.services.text_extraction import HttpTextExtractor
from shidduch.utils.errors import ExtractionError


def _extractor(handler):
    return HttpTextExtractor(url="http://extract.test/extract-file", transport=httpx.MockTransport(handler))


def _extract(extractor):
    return asyncio.run(extractor("resume.pdf", b"%PDF-1.4", "application/pdf"))


def test_returns_text_and_sends_file_field():
    seen = {}

    def handler(request):
        seen["body"] = request.content
        return httpx.Response(200, json={"text": "Sarah Cohen, 24"})

    assert _extract(_extractor(handler)) == "Sarah Cohen, 24"
    assert b'name="file"' in seen["body"]
    assert b'filename="resume.pdf"' in seen["body"]


def test_http_error_raises():
    with pytest.raises(ExtractionError, match="HTTP 500"):
        _extract(_extractor(lambda request: httpx.Response(500, text="boom")))


def test_non_json_raises():
    with pytest.raises(ExtractionError, match="invalid JSON"):
        _extract(_extractor(lambda request: httpx.Response(200, text="<html>")))


def test_missing_text_raises():
    with pytest.raises(ExtractionError, match="no text"):
        _extract(_extractor(lambda request: httpx.Response(200, json={"pages": 1})))


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ExtractionError, match="unreachable"):
        _extract(_extractor(handler))

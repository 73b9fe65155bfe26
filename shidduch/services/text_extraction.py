# shidduch/services/text_extraction.py
from __future__ import annotations

import logging
import os
from typing import Optional, Protocol

import httpx
from dotenv import load_dotenv

from shidduch.utils.errors import ExtractionError

load_dotenv()

logger = logging.getLogger("shidduch.ingest")

TEXT_EXTRACTION_URL = os.getenv(
    "TEXT_EXTRACTION_URL", "https://file-parser-server.vercel.app/extract-file"
)
TEXT_EXTRACTION_TIMEOUT = float(os.getenv("TEXT_EXTRACTION_TIMEOUT", "60"))


class TextExtractor(Protocol):
    async def __call__(self, filename: str, content: bytes, content_type: Optional[str] = None) -> str: ...


class HttpTextExtractor:
    """
    Client for the file-parsing endpoint: multipart upload in, {"text": str} out.
    """

    def __init__(
        self,
        url: str = TEXT_EXTRACTION_URL,
        timeout: float = TEXT_EXTRACTION_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def __call__(self, filename: str, content: bytes, content_type: Optional[str] = None) -> str:
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.post(self.url, files=files)
            r.raise_for_status()
            payload = r.json()
        except httpx.HTTPStatusError as e:
            raise ExtractionError(f"Text extraction failed with HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ExtractionError(f"Text extraction service unreachable: {e}") from e
        except ValueError as e:
            raise ExtractionError("Text extraction service returned invalid JSON") from e

        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise ExtractionError("Text extraction service returned no text")
        logger.info("text_extracted", extra={"file_name": filename, "chars": len(text)})
        return text


_default_extractor: Optional[HttpTextExtractor] = None


def get_text_extractor() -> TextExtractor:
    """FastAPI dependency; overridden in tests."""
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = HttpTextExtractor()
    return _default_extractor

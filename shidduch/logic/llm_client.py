# shidduch/logic/llm_client.py
from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional, Protocol

from dotenv import load_dotenv
from openai import AsyncOpenAI

from shidduch.utils.errors import CompletionError

load_dotenv()

logger = logging.getLogger("shidduch.llm")

OPENAI_PARSE_MODEL = os.getenv("OPENAI_PARSE_MODEL", "gpt-4o")
OPENAI_MATCH_MODEL = os.getenv("OPENAI_MATCH_MODEL", "gpt-4o-mini")

Message = Dict[str, str]

_FENCE_OPEN = re.compile(r"^\s*```[a-zA-Z]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```\s*$")


class Completion(Protocol):
    """Anything that turns chat messages into the model's reply text."""

    async def __call__(
        self,
        messages: List[Message],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str: ...


def strip_code_fences(s: str) -> str:
    """Remove one enclosing ```json ... ``` (or bare ```) wrapper."""
    s = (s or "").strip()
    s = _FENCE_OPEN.sub("", s, count=1)
    s = _FENCE_CLOSE.sub("", s, count=1)
    return s.strip()


def coerce_json_object(raw: str) -> Dict[str, Any]:
    """
    Strip fences and parse. Raises ValueError when the reply is not a single
    JSON object; callers decide how to degrade.
    """
    cleaned = strip_code_fences(raw)
    if not cleaned:
        raise ValueError("empty completion reply")
    data = json.loads(cleaned)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


class OpenAICompletion:
    """
    Chat-completions caller. The SDK's own retries are switched off: each
    call is attempted exactly once and the caller owns the failure policy.
    """

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            api_key = self._api_key or os.getenv("OPENAI_API_KEY", "")
            if not api_key:
                raise CompletionError("OPENAI_API_KEY is not set")
            kwargs: Dict[str, Any] = {"api_key": api_key, "max_retries": 0}
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def __call__(
        self,
        messages: List[Message],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        client = self._get_client()
        resp = await client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not resp.choices:
            raise CompletionError("completion service returned no choices")
        content = resp.choices[0].message.content or ""
        logger.debug("completion_received", extra={"model": model, "chars": len(content)})
        return content


_default_completion: Optional[OpenAICompletion] = None


def get_completion() -> Completion:
    """FastAPI dependency; overridden in tests."""
    global _default_completion
    if _default_completion is None:
        _default_completion = OpenAICompletion()
    return _default_completion

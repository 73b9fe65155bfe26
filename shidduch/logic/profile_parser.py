# shidduch/logic/profile_parser.py
from __future__ import annotations

import logging
import re
from typing import List, Optional

from shidduch.logic.llm_client import (
    Completion,
    Message,
    OPENAI_PARSE_MODEL,
    coerce_json_object,
)
from shidduch.schemas.profiles import ParsedProfile

logger = logging.getLogger("shidduch.parser")

PARSE_TEMPERATURE = 0.1
PARSE_MAX_TOKENS = 1500

_SYSTEM_PROMPT = (
    "You are an expert resume parser specializing in extracting structured profile data "
    "for Jewish matchmaking purposes. You are thorough and extract as much relevant "
    "information as possible."
)

_NAME_PATTERN = re.compile(r'"name"\s*:\s*"([^"]+)"')


def build_parse_prompt(text: str) -> str:
    return f"""
You are an expert resume parser. Analyze the following resume content and extract comprehensive profile information.

RESUME CONTENT TO ANALYZE:
{text}

Extract and return ONLY a JSON object with this exact structure:
{{
  "name": "Full name of the person",
  "age": number or null if not found,
  "location": "City, State/Country where they live",
  "occupation": "Current job title or profession",
  "education": "Educational background, schools attended, degrees",
  "background": "Religious background, family values, community involvement, personal qualities",
  "hashkafa": "Religious observance level (Orthodox, Modern Orthodox, Conservative, Reform, etc.)",
  "gender": "Male or Female",
  "interests": ["hobby1", "hobby2", "interest3"],
  "personality_traits": ["trait1", "trait2", "trait3"],
  "family_values": "Family priorities, what they're looking for in a match"
}}
""".strip()


def build_parse_messages(text: str) -> List[Message]:
    return [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": build_parse_prompt(text)},
    ]


def salvage_name(raw: str) -> Optional[str]:
    """Last-ditch name recovery from a reply that would not parse."""
    m = _NAME_PATTERN.search(raw or "")
    if not m:
        return None
    return m.group(1).strip() or None


def profile_from_reply(raw: str) -> ParsedProfile:
    """
    Turn a completion reply into a profile. Never raises: an unparseable reply
    yields an all-null profile, with the name filled in when it can still be
    found in the raw text.
    """
    try:
        data = coerce_json_object(raw)
        return ParsedProfile.model_validate(data)
    except Exception as e:
        logger.warning("profile_reply_unparseable", extra={"error": str(e), "chars": len(raw or "")})

    profile = ParsedProfile.empty()
    name = salvage_name(raw)
    if name:
        profile.name = name
    return profile


async def parse_profile(text: str, complete: Completion) -> ParsedProfile:
    """
    Extract a structured profile from raw document text.

    The caller always receives a profile; upstream and parse failures are
    absorbed here.
    """
    try:
        raw = await complete(
            build_parse_messages(text or ""),
            model=OPENAI_PARSE_MODEL,
            temperature=PARSE_TEMPERATURE,
            max_tokens=PARSE_MAX_TOKENS,
        )
    except Exception as e:
        logger.warning("profile_completion_failed", extra={"error": str(e)})
        return ParsedProfile.empty()

    return profile_from_reply(raw)

# shidduch/logic/profile_writer.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from shidduch.logic.llm_client import Completion, Message, OPENAI_MATCH_MODEL
from shidduch.utils.errors import CompletionError

logger = logging.getLogger("shidduch.profiles")

WRITER_TEMPERATURE = 0.7
WRITER_MAX_TOKENS = 1500

_SYSTEM_PROMPT = (
    "You are an expert matchmaker and profile writer who creates engaging, comprehensive "
    "shidduch profiles for Jewish matchmaking purposes. You write in a warm, professional "
    "tone that highlights the best qualities while being authentic."
)

_RESUME_FIELDS = (
    ("Name", "name"),
    ("Age", "age"),
    ("Location", "location"),
    ("Occupation", "occupation"),
    ("Education", "education"),
    ("Background", "background"),
    ("Religious Level", "hashkafa"),
    ("Family Values", "family_values"),
    ("Additional Information", "additional_info"),
)


def _resume_lines(uploaded_by: str, parsed: Dict[str, Any]) -> str:
    lines = [f"Uploaded by: {uploaded_by}"]
    for label, key in _RESUME_FIELDS:
        value = parsed.get(key)
        if value:
            lines.append(f"{label}: {value}")
    for label, key in (("Interests", "interests"), ("Personality", "personality_traits")):
        values = parsed.get(key)
        if isinstance(values, list) and values:
            lines.append(f"{label}: {', '.join(str(v) for v in values)}")
    return "\n".join(lines)


def build_profile_prompt(entry: Dict[str, Any], notes: List[str]) -> str:
    parsed = entry.get("parsed_data") or {}
    uploaded_by = entry.get("uploaded_by") or "Unknown"
    research = "\n\n".join(notes)
    return f"""
You are an expert matchmaker and profile writer. Based on the following resume details and research notes about a person, create a comprehensive and engaging shidduch profile that would be suitable for matchmaking purposes.

RESUME INFORMATION:
{_resume_lines(uploaded_by, parsed)}

RESEARCH NOTES FROM PARENT:
{research}

Please create a warm, professional shidduch profile that:
1. Starts with the person's name and gives a compelling overview
2. Highlights their best qualities, personality traits, and character
3. Describes their background, values, and religious observance
4. Mentions their education, career, and interests
5. Describes what kind of family they come from
6. Includes any other relevant details for matchmaking
7. Maintains a tone that is authentic, warm, and appealing to potential matches

Write this as a flowing narrative profile (3-4 paragraphs) that a shadchan would be proud to present.
""".strip()


def build_profile_messages(entry: Dict[str, Any], notes: List[str]) -> List[Message]:
    return [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": build_profile_prompt(entry, notes)},
    ]


async def write_profile(entry: Dict[str, Any], notes: List[str], complete: Completion) -> str:
    """
    Generate the narrative profile text. Failures and empty replies raise
    CompletionError.
    """
    try:
        text = await complete(
            build_profile_messages(entry, notes),
            model=OPENAI_MATCH_MODEL,
            temperature=WRITER_TEMPERATURE,
            max_tokens=WRITER_MAX_TOKENS,
        )
    except CompletionError:
        raise
    except Exception as e:
        logger.warning("profile_generation_failed", extra={"resume_id": str(entry.get("_id")), "error": str(e)})
        raise CompletionError("Failed to generate AI profile") from e

    text = (text or "").strip()
    if not text:
        raise CompletionError("Completion service returned an empty profile")
    return text

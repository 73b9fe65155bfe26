# shidduch/logic/match_scorer.py
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from shidduch.logic.llm_client import (
    Completion,
    Message,
    OPENAI_MATCH_MODEL,
    coerce_json_object,
)
from shidduch.schemas.profiles import MatchHighlights, PairScore, ScoredReply

logger = logging.getLogger("shidduch.scorer")

MATCH_TEMPERATURE = 0.3
MATCH_MAX_TOKENS = 800

FALLBACK_SCORE = 50
FALLBACK_STRENGTHS = ["Analysis unavailable"]
FALLBACK_CONCERNS = ["Could not analyze compatibility"]
FALLBACK_SUMMARY = "Match analysis failed, manual review recommended"

_SYSTEM_PROMPT = (
    "You are a professional shadchan (matchmaker) with deep understanding of Jewish "
    "matchmaking principles. Always return valid JSON without any markdown formatting "
    "or code blocks."
)

# Child fields in the order they are presented to the model
_CHILD_FIELDS = (
    ("Name", "name"),
    ("Age", "age"),
    ("Location", "location"),
    ("Occupation", "occupation"),
    ("Education", "education"),
    ("Background", "background"),
    ("Hashkafa", "hashkafa"),
    ("Gender", "gender"),
)


def fallback_highlights() -> MatchHighlights:
    return MatchHighlights(
        strengths=list(FALLBACK_STRENGTHS),
        concerns=list(FALLBACK_CONCERNS),
        summary=FALLBACK_SUMMARY,
    )


def build_match_prompt(child: Dict[str, Any], candidate_profile: Optional[Dict[str, Any]]) -> str:
    candidate_json = json.dumps(candidate_profile, indent=2, ensure_ascii=False, default=str)
    child_lines = "\n".join(f"{label}: {child.get(key)}" for label, key in _CHILD_FIELDS)
    return f"""
You are an expert matchmaker. Compare these two profiles and provide a detailed compatibility analysis.

UPLOADED RESUME PROFILE:
{candidate_json}

CHILD'S PROFILE:
{child_lines}

Analyze compatibility based on:
1. Religious observance level compatibility
2. Educational background compatibility
3. Geographic proximity
4. Age appropriateness
5. Family values alignment
6. Lifestyle compatibility
7. Gender appropriateness (most important)

Return ONLY a JSON object with this exact structure (no markdown formatting):
{{
  "match_score": number between 1-100,
  "highlights": {{
    "strengths": ["list of compatibility strengths"],
    "concerns": ["list of potential concerns"],
    "summary": "2-3 sentence summary of the match"
  }}
}}
""".strip()


def build_match_messages(child: Dict[str, Any], candidate_profile: Optional[Dict[str, Any]]) -> List[Message]:
    return [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": build_match_prompt(child, candidate_profile)},
    ]


async def score_pair(child: Dict[str, Any], entry: Dict[str, Any], complete: Completion) -> PairScore:
    """
    Score one (child, library entry) pairing. Never raises: a failed call or
    a reply that does not validate yields the neutral fallback result.
    """
    child_id = str(child.get("_id") or child.get("id") or "")
    entry_id = str(entry.get("_id") or entry.get("id") or "")
    parsed = entry.get("parsed_data")

    try:
        raw = await complete(
            build_match_messages(child, parsed),
            model=OPENAI_MATCH_MODEL,
            temperature=MATCH_TEMPERATURE,
            max_tokens=MATCH_MAX_TOKENS,
        )
        reply = ScoredReply.model_validate(coerce_json_object(raw))
    except Exception as e:
        logger.warning(
            "pair_scoring_degraded",
            extra={"child_resume_id": child_id, "resume_library_id": entry_id, "error": str(e)},
        )
        return PairScore(
            child_resume_id=child_id,
            resume_library_id=entry_id,
            match_score=FALLBACK_SCORE,
            highlights=fallback_highlights(),
            parsed_data=parsed,
            degraded=True,
        )

    return PairScore(
        child_resume_id=child_id,
        resume_library_id=entry_id,
        match_score=reply.match_score,
        highlights=reply.highlights,
        parsed_data=parsed,
    )


async def score_candidates(
    child: Dict[str, Any],
    entries: List[Dict[str, Any]],
    complete: Completion,
    concurrency: int = 1,
) -> List[PairScore]:
    """
    Score every entry against the child. Results come back in input order.

    concurrency=1 issues the calls strictly one after another. Larger values
    bound in-flight calls with a semaphore.
    """
    if concurrency <= 1:
        results: List[PairScore] = []
        for entry in entries:
            results.append(await score_pair(child, entry, complete))
        return results

    sem = asyncio.Semaphore(concurrency)

    async def _bounded(entry: Dict[str, Any]) -> PairScore:
        async with sem:
            return await score_pair(child, entry, complete)

    return list(await asyncio.gather(*(_bounded(e) for e in entries)))

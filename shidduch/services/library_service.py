# shidduch/services/library_service.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from shidduch.logic.llm_client import Completion
from shidduch.logic.profile_parser import parse_profile
from shidduch.services.text_extraction import TextExtractor
from shidduch.utils.datetime_serialization import now_utc
from shidduch.utils.mongo import RESUME_LIBRARY

logger = logging.getLogger("shidduch.ingest")

AI_SEARCH = "AI Search"
AI_PROFILE = "AI Profile"
DEFAULT_PURPOSE = AI_PROFILE


async def ingest_resume(
    db: Any,
    extractor: TextExtractor,
    complete: Completion,
    *,
    user: Any,
    filename: str,
    content: bytes,
    content_type: Optional[str] = None,
    uploaded_for: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Upload -> extract text -> create library row -> parse -> attach parsed data.

    Extraction and insert failures propagate. Parsing is best-effort: the
    parser never raises, and a failed update only leaves parsed_data empty.
    """
    purpose = (uploaded_for or "").strip() or DEFAULT_PURPOSE

    text = await extractor(filename, content, content_type)

    row: Dict[str, Any] = {
        "_id": str(uuid.uuid4()),
        "user_id": str(user.id),
        "uploaded_by": getattr(user, "email", None) or "Unknown",
        "uploaded_for": purpose,
        "tags": [],
        "parsed_data": None,
        "created_at": now_utc(),
    }
    await db[RESUME_LIBRARY].insert_one(row)
    logger.info("library_entry_created", extra={"entry_id": row["_id"], "uploaded_for": purpose})

    parsed = await parse_profile(text, complete)
    parsed_data = parsed.model_dump()
    try:
        await db[RESUME_LIBRARY].update_one(
            {"_id": row["_id"], "user_id": row["user_id"]},
            {"$set": {"parsed_data": parsed_data}},
        )
        row["parsed_data"] = parsed_data
    except Exception as e:
        logger.warning("parsed_data_update_failed", extra={"entry_id": row["_id"], "error": str(e)})

    return row


async def list_library(db: Any, user_id: str, uploaded_for: Optional[str] = None) -> List[Dict[str, Any]]:
    query: Dict[str, Any] = {"user_id": str(user_id)}
    if uploaded_for:
        query["uploaded_for"] = uploaded_for
    out: List[Dict[str, Any]] = []
    cursor = db[RESUME_LIBRARY].find(query).sort("created_at", -1)
    async for item in cursor:
        item.setdefault("tags", [])
        out.append(item)
    return out


async def load_candidate_pool(db: Any, user_id: str, context: str) -> List[Dict[str, Any]]:
    """Only entries uploaded for `context` are ever eligible for that context's searches."""
    query = {"user_id": str(user_id), "uploaded_for": context}
    return [item async for item in db[RESUME_LIBRARY].find(query).sort("created_at", -1)]


async def delete_library_entry(db: Any, user_id: str, entry_id: str) -> bool:
    """
    Owner-scoped delete. Match results pointing at the entry are left alone;
    readers tolerate the dangling reference.
    """
    res = await db[RESUME_LIBRARY].delete_one({"_id": str(entry_id), "user_id": str(user_id)})
    return res.deleted_count > 0

# shidduch/services/ai_profile_service.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from shidduch.logic.llm_client import Completion
from shidduch.logic.profile_writer import write_profile
from shidduch.services.notes_service import notes_for_resume
from shidduch.utils.datetime_serialization import now_utc
from shidduch.utils.errors import LibraryEntryNotFound, NotesRequired
from shidduch.utils.mongo import AI_PROFILES, RESUME_LIBRARY

logger = logging.getLogger("shidduch.profiles")


async def generate_ai_profile(
    db: Any,
    complete: Completion,
    *,
    user_id: str,
    resume_id: str,
    notes: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Write a narrative profile for one of the caller's library entries and
    store it. Without explicit notes the stored notes for the entry are used.
    """
    entry = await db[RESUME_LIBRARY].find_one({"_id": str(resume_id), "user_id": str(user_id)})
    if not entry:
        raise LibraryEntryNotFound(f"Library entry {resume_id} not found")

    if not notes:
        notes = await notes_for_resume(db, user_id, resume_id)
    if not notes:
        raise NotesRequired("No notes for this resume")

    summary = await write_profile(entry, notes, complete)

    row = {
        "_id": str(uuid.uuid4()),
        "parent_id": str(user_id),
        "resume_id": str(resume_id),
        "summary": summary,
        "created_at": now_utc(),
    }
    await db[AI_PROFILES].insert_one(row)
    logger.info("ai_profile_saved", extra={"profile_id": row["_id"], "resume_id": row["resume_id"]})
    return row


async def list_ai_profiles(db: Any, user_id: str, resume_id: str = "") -> List[Dict[str, Any]]:
    query: Dict[str, Any] = {"parent_id": str(user_id)}
    if resume_id:
        query["resume_id"] = str(resume_id)
    return [p async for p in db[AI_PROFILES].find(query).sort("created_at", -1)]


async def delete_ai_profile(db: Any, user_id: str, profile_id: str) -> bool:
    res = await db[AI_PROFILES].delete_one({"_id": str(profile_id), "parent_id": str(user_id)})
    return res.deleted_count > 0

# shidduch/services/notes_service.py
# Research notes a parent keeps about a library entry; they feed AI profile generation.
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from shidduch.schemas.profiles import NoteCreate, NoteUpdate
from shidduch.utils.datetime_serialization import now_utc
from shidduch.utils.errors import LibraryEntryNotFound
from shidduch.utils.mongo import NOTES, RESUME_LIBRARY

logger = logging.getLogger("shidduch.notes")


async def create_note(db: Any, user_id: str, body: NoteCreate) -> Dict[str, Any]:
    """Store a note. A `resume_id`, when given, must name one of the caller's library entries."""
    user_id = str(user_id)
    if body.resume_id:
        entry = await db[RESUME_LIBRARY].find_one({"_id": str(body.resume_id), "user_id": user_id})
        if not entry:
            raise LibraryEntryNotFound(f"Library entry {body.resume_id} not found")

    now = now_utc()
    row = body.model_dump()
    row.update({"_id": str(uuid.uuid4()), "user_id": user_id, "created_at": now, "updated_at": now})
    await db[NOTES].insert_one(row)
    logger.info("note_created", extra={"note_id": row["_id"], "resume_id": row.get("resume_id")})
    return row


async def list_notes(db: Any, user_id: str, resume_id: Optional[str] = None) -> List[Dict[str, Any]]:
    query: Dict[str, Any] = {"user_id": str(user_id)}
    if resume_id:
        query["resume_id"] = str(resume_id)
    return [n async for n in db[NOTES].find(query).sort("created_at", -1)]


async def update_note(db: Any, user_id: str, note: Dict[str, Any], body: NoteUpdate) -> Dict[str, Any]:
    changes = body.model_dump(exclude_unset=True)
    changes["updated_at"] = now_utc()
    await db[NOTES].update_one({"_id": note["_id"], "user_id": str(user_id)}, {"$set": changes})
    note.update(changes)
    return note


async def delete_note(db: Any, user_id: str, note_id: str) -> bool:
    res = await db[NOTES].delete_one({"_id": str(note_id), "user_id": str(user_id)})
    return res.deleted_count > 0


def format_note(note: Dict[str, Any]) -> str:
    return f"{note.get('title') or 'Untitled Note'}: {note.get('content') or ''}".strip()


async def notes_for_resume(db: Any, user_id: str, resume_id: str) -> List[str]:
    """The caller's stored notes for one library entry, as 'title: content' lines."""
    return [format_note(n) for n in await list_notes(db, user_id, resume_id=resume_id)]

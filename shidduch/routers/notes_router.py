# shidduch/routers/notes_router.py
from fastapi import APIRouter, Depends, HTTPException, Path, Query
from typing import Optional

from shidduch.middleware.ownership import fetch_and_assert_owner
from shidduch.routers.auth_router import get_current_user
from shidduch.schemas.profiles import NoteCreate, NoteUpdate
from shidduch.services.notes_service import create_note, delete_note, list_notes, update_note
from shidduch.utils.datetime_serialization import serialize_row
from shidduch.utils.errors import LibraryEntryNotFound
from shidduch.utils.mongo import NOTES, get_db

router = APIRouter()


@router.post("", status_code=201)
async def add_note(
    body: NoteCreate,
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    try:
        row = await create_note(db, current_user.id, body)
    except LibraryEntryNotFound:
        raise HTTPException(status_code=404, detail="Resume not found")
    return serialize_row(row)


@router.get("")
async def get_notes(
    resume_id: Optional[str] = Query(None),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    rows = await list_notes(db, current_user.id, resume_id=resume_id)
    return {"notes": [serialize_row(r) for r in rows]}


@router.patch("/{note_id}")
async def edit_note(
    body: NoteUpdate,
    note_id: str = Path(...),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    note = await fetch_and_assert_owner(db[NOTES], note_id, current_user.id, label="Note")
    if not body.model_dump(exclude_unset=True):
        raise HTTPException(status_code=400, detail="No fields to update")
    return serialize_row(await update_note(db, current_user.id, note, body))


@router.delete("/{note_id}")
async def remove_note(
    note_id: str = Path(...),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    await fetch_and_assert_owner(db[NOTES], note_id, current_user.id, label="Note")
    await delete_note(db, current_user.id, note_id)
    return {"ok": True, "message": "Note deleted"}

# shidduch/routers/ai_profile_router.py
from fastapi import APIRouter, Depends, HTTPException, Path, Query
import logging

from shidduch.logic.llm_client import get_completion
from shidduch.middleware.ownership import fetch_and_assert_owner
from shidduch.routers.auth_router import get_current_user
from shidduch.schemas.profiles import AIProfileRequest
from shidduch.services.ai_profile_service import (
    delete_ai_profile,
    generate_ai_profile,
    list_ai_profiles,
)
from shidduch.utils.datetime_serialization import serialize_row
from shidduch.utils.errors import CompletionError, LibraryEntryNotFound, NotesRequired
from shidduch.utils.mongo import AI_PROFILES, get_db

logger = logging.getLogger("shidduch.profiles")

router = APIRouter()


@router.post("", status_code=201)
async def create_ai_profile(
    body: AIProfileRequest,
    current_user=Depends(get_current_user),
    db=Depends(get_db),
    complete=Depends(get_completion),
):
    try:
        row = await generate_ai_profile(
            db, complete, user_id=current_user.id, resume_id=body.resume_id, notes=body.notes
        )
    except LibraryEntryNotFound:
        raise HTTPException(status_code=404, detail="Resume not found")
    except NotesRequired:
        raise HTTPException(
            status_code=400,
            detail="Please add some notes for this resume before generating an AI profile.",
        )
    except CompletionError as e:
        raise HTTPException(status_code=502, detail=str(e))

    out = serialize_row(row)
    return {"id": out["id"], "summary": out["summary"], "created_at": out["created_at"]}


@router.get("")
async def get_ai_profiles(
    resume_id: str = Query(""),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    rows = await list_ai_profiles(db, current_user.id, resume_id=resume_id)
    return {"profiles": [serialize_row(r) for r in rows]}


@router.delete("/{profile_id}")
async def remove_ai_profile(
    profile_id: str = Path(...),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    await fetch_and_assert_owner(
        db[AI_PROFILES], profile_id, current_user.id, owner_field="parent_id", label="AI profile"
    )
    await delete_ai_profile(db, current_user.id, profile_id)
    return {"ok": True, "message": "AI profile deleted"}

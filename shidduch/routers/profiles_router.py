# shidduch/routers/profiles_router.py
# Child profiles: the typed, form-entered side of every match.
from fastapi import APIRouter, Depends, HTTPException, Path
from typing import Any, Dict
import uuid

from shidduch.middleware.ownership import fetch_and_assert_owner
from shidduch.routers.auth_router import get_current_user
from shidduch.schemas.profiles import ChildProfileCreate, ChildProfileUpdate
from shidduch.utils.datetime_serialization import now_utc, serialize_row
from shidduch.utils.mongo import CHILD_PROFILES, get_db

router = APIRouter()


@router.post("", status_code=201)
async def create_profile(
    body: ChildProfileCreate,
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    now = now_utc()
    row: Dict[str, Any] = body.model_dump()
    row.update({"_id": str(uuid.uuid4()), "user_id": current_user.id, "created_at": now, "updated_at": now})
    await db[CHILD_PROFILES].insert_one(row)
    return serialize_row(row)


@router.get("")
async def list_profiles(current_user=Depends(get_current_user), db=Depends(get_db)):
    cursor = db[CHILD_PROFILES].find({"user_id": current_user.id}).sort("created_at", -1)
    return {"profiles": [serialize_row(p) async for p in cursor]}


@router.get("/{profile_id}")
async def get_profile(
    profile_id: str = Path(...),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    doc = await fetch_and_assert_owner(db[CHILD_PROFILES], profile_id, current_user.id, label="Profile")
    return serialize_row(doc)


@router.patch("/{profile_id}")
async def update_profile(
    body: ChildProfileUpdate,
    profile_id: str = Path(...),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    """
    Partial update. Existing match results keep the scores computed against
    the profile as it was at search time.
    """
    doc = await fetch_and_assert_owner(db[CHILD_PROFILES], profile_id, current_user.id, label="Profile")
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    changes["updated_at"] = now_utc()
    await db[CHILD_PROFILES].update_one({"_id": doc["_id"], "user_id": current_user.id}, {"$set": changes})
    doc.update(changes)
    return serialize_row(doc)


@router.delete("/{profile_id}")
async def delete_profile(
    profile_id: str = Path(...),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    # no cascade: match results referencing this profile stay
    doc = await fetch_and_assert_owner(db[CHILD_PROFILES], profile_id, current_user.id, label="Profile")
    await db[CHILD_PROFILES].delete_one({"_id": doc["_id"], "user_id": current_user.id})
    return {"ok": True, "message": "Profile deleted"}

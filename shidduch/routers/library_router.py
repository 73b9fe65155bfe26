# shidduch/routers/library_router.py
from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, Query, UploadFile
from typing import Optional
import logging
import os

from shidduch.logic.llm_client import get_completion
from shidduch.middleware.ownership import fetch_and_assert_owner
from shidduch.routers.auth_router import get_current_user
from shidduch.services.library_service import (
    DEFAULT_PURPOSE,
    delete_library_entry,
    ingest_resume,
    list_library,
)
from shidduch.services.text_extraction import get_text_extractor
from shidduch.utils.datetime_serialization import serialize_row
from shidduch.utils.errors import ExtractionError
from shidduch.utils.mongo import RESUME_LIBRARY, get_db

logger = logging.getLogger("shidduch.ingest")

router = APIRouter()

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))  # 10MB


@router.post("/upload", status_code=201)
async def upload_resume(
    file: UploadFile = File(...),
    uploaded_for: str = Form(DEFAULT_PURPOSE),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
    extractor=Depends(get_text_extractor),
    complete=Depends(get_completion),
):
    """
    Extract, store and best-effort parse one uploaded resume. The upload
    succeeds even when the parsed profile comes back empty.
    """
    filename = file.filename or "resume"
    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(contents) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="Uploaded file is too large")

    try:
        entry = await ingest_resume(
            db,
            extractor,
            complete,
            user=current_user,
            filename=filename,
            content=contents,
            content_type=file.content_type,
            uploaded_for=uploaded_for,
        )
    except ExtractionError as e:
        logger.warning("upload_extraction_failed", extra={"file_name": filename, "error": str(e)})
        raise HTTPException(status_code=502, detail="Failed to upload resume: text extraction failed")
    except Exception:
        logger.exception("upload_failed", extra={"file_name": filename})
        raise HTTPException(status_code=500, detail="Failed to upload resume")

    return serialize_row(entry)


@router.get("")
async def get_library(
    uploaded_for: Optional[str] = Query(None),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    items = await list_library(db, current_user.id, uploaded_for=uploaded_for)
    return {"items": [serialize_row(i) for i in items]}


@router.delete("/{entry_id}")
async def remove_library_entry(
    entry_id: str = Path(...),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    await fetch_and_assert_owner(db[RESUME_LIBRARY], entry_id, current_user.id, label="Resume")
    await delete_library_entry(db, current_user.id, entry_id)
    return {"ok": True, "message": "Resume deleted successfully"}

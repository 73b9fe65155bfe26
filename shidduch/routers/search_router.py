# shidduch/routers/search_router.py
from fastapi import APIRouter, Depends, HTTPException, Path, Query
from typing import Optional
import logging

from shidduch.logic.llm_client import get_completion
from shidduch.logic.response_builder import (
    batch_search_response,
    build_failure_notification,
    search_response,
)
from shidduch.middleware.ownership import fetch_and_assert_owner
from shidduch.routers.auth_router import get_current_user
from shidduch.services.library_service import AI_SEARCH
from shidduch.services.search_service import (
    delete_match,
    list_matches,
    run_search_for_all_children,
    run_search_for_child,
)
from shidduch.utils.errors import ChildProfileNotFound, PersistenceError
from shidduch.utils.mongo import AI_MATCH_RESULTS, get_db

logger = logging.getLogger("shidduch.search")

router = APIRouter()


def _failure(status_code: int, action: str) -> HTTPException:
    note = build_failure_notification(action)
    return HTTPException(status_code=status_code, detail={"message": note["description"], "notification": note})


@router.post("")
async def search_all_children(
    current_user=Depends(get_current_user),
    db=Depends(get_db),
    complete=Depends(get_completion),
):
    try:
        outcomes = await run_search_for_all_children(db, complete, user_id=current_user.id, context=AI_SEARCH)
    except ChildProfileNotFound:
        raise HTTPException(
            status_code=404,
            detail="No child resumes found. Please create at least one child's resume before running AI search.",
        )
    except Exception:
        logger.exception("search_all_failed", extra={"user_id": current_user.id})
        raise _failure(500, "run AI search")
    return batch_search_response(outcomes)


@router.get("/results")
async def get_results(
    child_id: Optional[str] = Query(None),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    return {"results": await list_matches(db, current_user.id, child_id=child_id)}


@router.delete("/results/{match_id}")
async def remove_result(
    match_id: str = Path(...),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    await fetch_and_assert_owner(
        db[AI_MATCH_RESULTS], match_id, current_user.id, owner_field="parent_id", label="Match result"
    )
    await delete_match(db, current_user.id, match_id)
    return {"ok": True, "message": "Match result deleted successfully"}


@router.post("/{child_id}")
async def search_for_child(
    child_id: str = Path(...),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
    complete=Depends(get_completion),
):
    """
    Score the caller's "AI Search" pool against one child profile and save
    the batch. Degraded pairs are saved with a neutral score; only a failed
    save or pool read fails the request.
    """
    try:
        outcome = await run_search_for_child(
            db, complete, user_id=current_user.id, child_id=child_id, context=AI_SEARCH
        )
    except ChildProfileNotFound:
        raise HTTPException(status_code=404, detail="The selected child's resume could not be found.")
    except PersistenceError:
        raise _failure(500, "save match results")
    except Exception:
        logger.exception("search_failed", extra={"child_resume_id": child_id})
        raise _failure(500, "run AI search")
    return search_response(outcome)

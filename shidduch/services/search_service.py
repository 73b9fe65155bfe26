# shidduch/services/search_service.py
from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Any, Dict, Iterable, List, Optional

from dotenv import load_dotenv

from shidduch.logic.candidate_filter import filter_candidates
from shidduch.logic.llm_client import Completion
from shidduch.logic.match_scorer import score_candidates
from shidduch.schemas.profiles import PairScore, SearchOutcome
from shidduch.services.library_service import AI_SEARCH, load_candidate_pool
from shidduch.utils.datetime_serialization import now_utc, serialize_row
from shidduch.utils.errors import ChildProfileNotFound, PersistenceError
from shidduch.utils.mongo import AI_MATCH_RESULTS, CHILD_PROFILES, RESUME_LIBRARY

load_dotenv()

logger = logging.getLogger("shidduch.search")

MATCH_SCORING_CONCURRENCY = int(os.getenv("MATCH_SCORING_CONCURRENCY", "1"))

_CHILD_SUMMARY_FIELDS = ("name", "age", "location", "occupation")


# -----------------------------
# Persistence
# -----------------------------
async def persist_matches(
    db: Any,
    user_id: str,
    scores: List[PairScore],
) -> List[Dict[str, Any]]:
    """
    Write one row per scored pair as a single batch. Either the whole batch is
    stored or none of it: on failure, rows already written under this
    search_id are removed before PersistenceError is raised.
    """
    search_id = str(uuid.uuid4())
    created_at = now_utc()
    rows = [
        {
            "_id": str(uuid.uuid4()),
            "parent_id": str(user_id),
            "child_resume_id": s.child_resume_id,
            "resume_library_id": s.resume_library_id,
            "match_score": s.match_score,
            "highlights": s.highlights.model_dump(),
            "search_id": search_id,
            "created_at": created_at,
        }
        for s in scores
    ]
    if not rows:
        return []

    try:
        await db[AI_MATCH_RESULTS].insert_many(rows, ordered=True)
    except Exception as e:
        logger.error("match_batch_insert_failed", extra={"search_id": search_id, "rows": len(rows), "error": str(e)})
        try:
            await db[AI_MATCH_RESULTS].delete_many({"search_id": search_id})
        except Exception as cleanup_err:
            logger.error("match_batch_cleanup_failed", extra={"search_id": search_id, "error": str(cleanup_err)})
        raise PersistenceError("Failed to save match results") from e

    logger.info("match_batch_saved", extra={"search_id": search_id, "rows": len(rows)})
    return rows


# -----------------------------
# Read side
# -----------------------------
async def _rows_by_id(db: Any, collection: str, ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    wanted = sorted({i for i in ids if i})
    if not wanted:
        return {}
    out: Dict[str, Dict[str, Any]] = {}
    async for row in db[collection].find({"_id": {"$in": wanted}}):
        out[str(row["_id"])] = row
    return out


async def attach_references(db: Any, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Join each match row with its child summary and matched library entry.
    Deleted references come back as None rather than failing the read.
    """
    children = await _rows_by_id(db, CHILD_PROFILES, (r.get("child_resume_id") for r in rows))
    entries = await _rows_by_id(db, RESUME_LIBRARY, (r.get("resume_library_id") for r in rows))

    out: List[Dict[str, Any]] = []
    for row in rows:
        item = serialize_row(row)
        item.pop("search_id", None)
        child = children.get(row.get("child_resume_id"))
        entry = entries.get(row.get("resume_library_id"))
        item["child_resume"] = {k: child.get(k) for k in _CHILD_SUMMARY_FIELDS} if child else None
        item["matched_resume"] = (
            {"parsed_data": entry.get("parsed_data"), "uploaded_by": entry.get("uploaded_by")}
            if entry
            else None
        )
        out.append(item)
    return out


async def list_matches(db: Any, user_id: str, child_id: Optional[str] = None) -> List[Dict[str, Any]]:
    query: Dict[str, Any] = {"parent_id": str(user_id)}
    if child_id:
        query["child_resume_id"] = str(child_id)
    rows = [r async for r in db[AI_MATCH_RESULTS].find(query).sort("created_at", -1)]
    return await attach_references(db, rows)


async def delete_match(db: Any, user_id: str, match_id: str) -> bool:
    res = await db[AI_MATCH_RESULTS].delete_one({"_id": str(match_id), "parent_id": str(user_id)})
    return res.deleted_count > 0


# -----------------------------
# Orchestration
# -----------------------------
async def run_search_for_child(
    db: Any,
    complete: Completion,
    *,
    user_id: str,
    child_id: str,
    context: str = AI_SEARCH,
    concurrency: Optional[int] = None,
) -> SearchOutcome:
    """
    Child -> context pool -> gender filter -> pairwise scoring -> batch write.

    An empty pool (before or after filtering) is a normal outcome and no
    scoring calls are made. Pool-load and persistence failures propagate.
    """
    started = time.perf_counter()
    user_id = str(user_id)

    child = await db[CHILD_PROFILES].find_one({"_id": str(child_id), "user_id": user_id})
    if not child:
        raise ChildProfileNotFound(f"Child profile {child_id} not found")

    pool = await load_candidate_pool(db, user_id, context)
    base = {"child_resume_id": str(child["_id"]), "child_name": child.get("name"), "context": context}

    if not pool:
        logger.info("search_no_pool", extra={"child_resume_id": base["child_resume_id"], "context": context})
        return SearchOutcome(status="no_candidates", message=f"No resumes found for {context}", **base)

    selection = filter_candidates(child.get("gender"), pool)
    logger.info(
        "search_pool_filtered",
        extra={
            "child_resume_id": base["child_resume_id"],
            "original": selection.original_count,
            "kept": len(selection.candidates),
            "target_gender": selection.target_gender,
        },
    )
    if selection.is_empty:
        return SearchOutcome(
            status="no_candidates",
            message=(
                "No resumes found with compatible gender "
                f"(looking for {selection.target_gender} candidates)"
            ),
            original_count=selection.original_count,
            filtered_by_gender=selection.filtered_out,
            **base,
        )

    scores = await score_candidates(
        child,
        selection.candidates,
        complete,
        concurrency=concurrency if concurrency is not None else MATCH_SCORING_CONCURRENCY,
    )
    degraded = sum(1 for s in scores if s.degraded)

    rows = await persist_matches(db, user_id, scores)
    matches = await attach_references(db, rows)

    logger.info(
        "search_completed",
        extra={
            "child_resume_id": base["child_resume_id"],
            "scored": len(scores),
            "degraded": degraded,
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return SearchOutcome(
        status="partial" if degraded else "success",
        matches=matches,
        total_processed=len(selection.candidates),
        original_count=selection.original_count,
        filtered_by_gender=selection.filtered_out,
        degraded_count=degraded,
        **base,
    )


def _failed_outcome(child: Dict[str, Any], context: str, message: str) -> SearchOutcome:
    return SearchOutcome(
        status="failed",
        child_resume_id=str(child["_id"]),
        child_name=child.get("name"),
        context=context,
        message=message,
    )


async def run_search_for_all_children(
    db: Any,
    complete: Completion,
    *,
    user_id: str,
    context: str = AI_SEARCH,
) -> List[SearchOutcome]:
    """
    Run the per-child search for every child profile, one child at a time.
    A child whose search fails gets a "failed" outcome and the loop moves on.
    """
    children = [
        c async for c in db[CHILD_PROFILES].find({"user_id": str(user_id)}).sort("created_at", 1)
    ]
    if not children:
        raise ChildProfileNotFound("No child resumes found")

    outcomes: List[SearchOutcome] = []
    for child in children:
        child_id = str(child["_id"])
        try:
            outcome = await run_search_for_child(db, complete, user_id=user_id, child_id=child_id, context=context)
        except PersistenceError:
            logger.error("search_child_failed", extra={"child_resume_id": child_id, "stage": "persist"})
            outcome = _failed_outcome(child, context, "Failed to save match results")
        except Exception:
            logger.exception("search_child_failed", extra={"child_resume_id": child_id})
            outcome = _failed_outcome(child, context, "AI search failed for this child")
        outcomes.append(outcome)
    return outcomes

# shidduch/middleware/ownership.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException
from starlette.status import HTTP_403_FORBIDDEN, HTTP_404_NOT_FOUND

JSONDoc = Dict[str, Any]


def assert_owner(
    doc: Optional[JSONDoc],
    user_id: str,
    *,
    owner_field: str = "user_id",
    label: str = "Resource",
) -> JSONDoc:
    """
    Ensure that `doc` exists and belongs to `user_id`.
    Returns the doc if OK; raises 404/403 otherwise.
    """
    if not doc:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=f"{label} not found")

    doc_owner = str(doc.get(owner_field, ""))
    if not doc_owner:
        # rows without an owner read as missing
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=f"{label} not found")

    if doc_owner != str(user_id):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Forbidden")

    return doc


async def fetch_and_assert_owner(
    collection: Any,
    resource_id: str,
    user_id: str,
    *,
    owner_field: str = "user_id",
    label: str = "Resource",
) -> JSONDoc:
    """Load a row by `_id` from `collection` and ensure it belongs to `user_id`."""
    doc = await collection.find_one({"_id": str(resource_id)})
    return assert_owner(doc, user_id, owner_field=owner_field, label=label)

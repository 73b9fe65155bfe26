from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional


def now_utc() -> datetime:
    """Timezone-aware UTC now for consistent storage and ordering."""
    return datetime.now(timezone.utc)


def serialize_utc(dt: datetime) -> str:
    """
    Serialize datetime as strict UTC ISO-8601 with trailing Z.
    Naive datetimes (Mongo hands them back that way) are assumed UTC.
    """
    if not isinstance(dt, datetime):
        raise TypeError("serialize_utc expects datetime")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="seconds").replace("+00:00", "Z")


def serialize_row(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Shape a stored row for JSON output: `_id` becomes `id`, timestamps become
    ISO strings. Nested dicts (parsed_data, highlights) are left as stored.
    """
    if row is None:
        return None
    out: Dict[str, Any] = {}
    for key, value in row.items():
        if key == "_id":
            out["id"] = str(value)
        elif isinstance(value, datetime):
            out[key] = serialize_utc(value)
        else:
            out[key] = value
    return out

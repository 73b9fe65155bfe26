# shidduch/logic/candidate_filter.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

_OPPOSITE = {"male": "female", "female": "male"}


def _lower(s: Any) -> str:
    return s.strip().lower() if isinstance(s, str) else ""


def opposite_gender(gender: Optional[str]) -> Optional[str]:
    """male <-> female; None when the gender is absent or unrecognised."""
    return _OPPOSITE.get(_lower(gender))


def entry_gender(entry: Dict[str, Any]) -> str:
    parsed = entry.get("parsed_data")
    if not isinstance(parsed, dict):
        return ""
    return _lower(parsed.get("gender"))


@dataclass
class PoolSelection:
    candidates: List[Dict[str, Any]]
    original_count: int
    target_gender: Optional[str] = None
    filtered_out: int = field(init=False)

    def __post_init__(self) -> None:
        self.filtered_out = self.original_count - len(self.candidates)

    @property
    def is_empty(self) -> bool:
        return not self.candidates


def filter_candidates(child_gender: Optional[str], entries: List[Dict[str, Any]]) -> PoolSelection:
    """
    Keep the library entries whose parsed gender is the opposite of the
    child's. Without a usable child gender the whole pool passes through.
    """
    target = opposite_gender(child_gender)
    if target is None:
        return PoolSelection(candidates=list(entries), original_count=len(entries))

    kept = [e for e in entries if entry_gender(e) == target]
    return PoolSelection(candidates=kept, original_count=len(entries), target_gender=target)

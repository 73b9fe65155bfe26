# shidduch/schemas/profiles.py
from __future__ import annotations

import math
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

GENDERS = ("male", "female")


def normalize_gender(value: Any) -> Optional[str]:
    """'Male ' -> 'male'; anything that isn't male/female -> None."""
    if not isinstance(value, str):
        return None
    v = value.strip().lower()
    return v if v in GENDERS else None


def _coerce_age(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
        if not math.isfinite(number):
            return None
        age = int(round(number))
    except (TypeError, ValueError, OverflowError):
        return None
    return age if age >= 0 else None


def _coerce_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        joined = ", ".join(str(v).strip() for v in value if str(v).strip())
        return joined or None
    return None


def _coerce_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return []


# ===============================
# Child profiles (typed, form-entered)
# ===============================

class ChildProfileCreate(BaseModel):
    name: str = Field(min_length=1)
    age: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    occupation: Optional[str] = None
    education: Optional[str] = None
    background: Optional[str] = None
    hashkafa: Optional[str] = None
    gender: Optional[str] = None

    @field_validator("gender", mode="before")
    @classmethod
    def _gender(cls, v: Any) -> Optional[str]:
        return normalize_gender(v)


class ChildProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    age: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    occupation: Optional[str] = None
    education: Optional[str] = None
    background: Optional[str] = None
    hashkafa: Optional[str] = None
    gender: Optional[str] = None

    @field_validator("gender", mode="before")
    @classmethod
    def _gender(cls, v: Any) -> Optional[str]:
        return normalize_gender(v)


# ===============================
# Parsed (library) profiles
# ===============================

class ParsedProfile(BaseModel):
    """
    Best-effort profile recovered from a model reply. Every field is optional
    and each one is coerced on its own, so one bad field never sinks the rest.
    """
    name: Optional[str] = None
    age: Optional[int] = None
    location: Optional[str] = None
    occupation: Optional[str] = None
    education: Optional[str] = None
    background: Optional[str] = None
    hashkafa: Optional[str] = None
    gender: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    personality_traits: List[str] = Field(default_factory=list)
    family_values: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("age", mode="before")
    @classmethod
    def _age(cls, v: Any) -> Optional[int]:
        return _coerce_age(v)

    @field_validator(
        "name", "location", "occupation", "education", "background", "hashkafa", "family_values",
        mode="before",
    )
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        return _coerce_text(v)

    @field_validator("gender", mode="before")
    @classmethod
    def _gender(cls, v: Any) -> Optional[str]:
        return normalize_gender(v)

    @field_validator("interests", "personality_traits", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> List[str]:
        return _coerce_str_list(v)

    @classmethod
    def empty(cls) -> "ParsedProfile":
        return cls()

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())


# ===============================
# Match results
# ===============================

class MatchHighlights(BaseModel):
    strengths: List[str]
    concerns: List[str]
    summary: str

    @field_validator("strengths", "concerns", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> List[str]:
        if not isinstance(v, list):
            raise ValueError("expected a list of strings")
        items = _coerce_str_list(v)
        if not items:
            raise ValueError("expected at least one entry")
        return items

    @field_validator("summary", mode="before")
    @classmethod
    def _summary(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("summary must be a string")
        return v.strip()


class ScoredReply(BaseModel):
    """Shape the scorer demands from the completion reply."""
    match_score: int
    highlights: MatchHighlights

    @field_validator("match_score", mode="before")
    @classmethod
    def _score(cls, v: Any) -> int:
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            raise ValueError("match_score must be numeric")
        return int(round(float(v)))


class PairScore(BaseModel):
    child_resume_id: str
    resume_library_id: str
    match_score: int
    highlights: MatchHighlights
    parsed_data: Optional[Dict[str, Any]] = None
    degraded: bool = False


SearchStatus = Literal["success", "partial", "no_candidates", "failed"]


class SearchOutcome(BaseModel):
    """
    Structured result of one search invocation. A presentation layer turns it
    into user notifications; the pipeline never does.
    """
    status: SearchStatus
    child_resume_id: str
    child_name: Optional[str] = None
    context: str
    message: Optional[str] = None
    matches: List[Dict[str, Any]] = Field(default_factory=list)
    total_processed: int = 0
    original_count: int = 0
    filtered_by_gender: int = 0
    degraded_count: int = 0


# ===============================
# AI profile writer
# ===============================

class AIProfileRequest(BaseModel):
    """`notes` may be omitted; the stored notes for `resume_id` are used instead."""
    resume_id: str
    notes: List[str] = Field(default_factory=list)

    @field_validator("notes")
    @classmethod
    def _notes(cls, v: List[str]) -> List[str]:
        return [n.strip() for n in v if isinstance(n, str) and n.strip()]


# ===============================
# Notes
# ===============================

class NoteCreate(BaseModel):
    title: str = "New Note"
    content: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_private: bool = False
    resume_id: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v: Any) -> str:
        return _coerce_text(v) or "New Note"

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> List[str]:
        return _coerce_str_list(v)


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    is_private: Optional[bool] = None


__all__ = [
    "normalize_gender",
    "ChildProfileCreate",
    "ChildProfileUpdate",
    "ParsedProfile",
    "MatchHighlights",
    "ScoredReply",
    "PairScore",
    "SearchOutcome",
    "AIProfileRequest",
    "NoteCreate",
    "NoteUpdate",
]

# shidduch/logic/response_builder.py
# Translates pipeline outcomes into the notification payloads the web client shows.
from typing import Any, Dict, List

from shidduch.schemas.profiles import SearchOutcome


def _note(title: str, description: str, variant: str = "default") -> Dict[str, str]:
    return {"title": title, "description": description, "variant": variant}


def build_notification(outcome: SearchOutcome) -> Dict[str, str]:
    name = outcome.child_name or "this profile"

    if outcome.status == "failed":
        return _note(
            "Error",
            f"AI search for {name} failed: {outcome.message or 'unknown error'}. Please try again.",
            "destructive",
        )

    if outcome.status == "no_candidates":
        if outcome.original_count == 0:
            return _note(
                "No Uploaded Resumes Found",
                f"Please upload at least one resume for {outcome.context} before running the analysis.",
                "destructive",
            )
        return _note(
            "No Matches Found",
            outcome.message or f"No compatible matches were found for {name}.",
        )

    found = len(outcome.matches)
    description = (
        f"Found {found} potential matches for {name} "
        f"from {outcome.total_processed} uploaded resumes."
    )
    if outcome.status == "partial":
        description += (
            f" {outcome.degraded_count} could not be analyzed automatically"
            " and are marked for manual review."
        )
    return _note("AI Search Complete!", description)


def build_failure_notification(action: str) -> Dict[str, str]:
    return _note("Error", f"Failed to {action}. Please try again.", "destructive")


def search_response(outcome: SearchOutcome) -> Dict[str, Any]:
    body = outcome.model_dump()
    body["notification"] = build_notification(outcome)
    return body


def batch_search_response(outcomes: List[SearchOutcome]) -> Dict[str, Any]:
    return {
        "results": [search_response(o) for o in outcomes],
        "total_matches": sum(len(o.matches) for o in outcomes),
        "failed_children": sum(1 for o in outcomes if o.status == "failed"),
    }

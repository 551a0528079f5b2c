"""
validator.py — Stage 1: request validation
==========================================
Rejects malformed submissions before any store is touched and hands
the next stage a normalized ReviewSubmission.

Policy:
  - facultyId: non-blank string.
  - rating:    a JSON number (booleans rejected), whole-valued, 1..5.
               4.0 is accepted as 4; 4.5 is rejected.
  - comment:   optional. null / "" mean no comment. Otherwise a string
               whose raw length is at most comment_max_length; stored
               trimmed, whitespace-only collapses to null. No minimum.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from ..config import settings
from ..errors import InvalidSubmission
from ..schemas import ReviewSubmission

MIN_RATING = 1
MAX_RATING = 5


def _validate_faculty_id(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidSubmission("Invalid faculty ID")
    return value


def _validate_rating(value: Any) -> int:
    # bool is an int subclass; JSON true must not count as a rating of 1
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidSubmission("Rating must be between 1 and 5")
    if not MIN_RATING <= value <= MAX_RATING:
        raise InvalidSubmission("Rating must be between 1 and 5")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidSubmission("Rating must be a whole number between 1 and 5")
    return int(value)


def _validate_comment(value: Any, max_length: int) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidSubmission("Comment must be a string")
    if len(value) > max_length:
        raise InvalidSubmission(f"Comment must be at most {max_length} characters")
    return value.strip() or None


def validate_submission(payload: Any, max_comment_length: Optional[int] = None) -> ReviewSubmission:
    """
    Validate a decoded JSON body of the form
    ``{"facultyId": str, "rating": number, "comment"?: str}``.

    Raises InvalidSubmission on the first failing field, checked in the
    order facultyId, rating, comment.
    """
    if not isinstance(payload, Mapping):
        raise InvalidSubmission("Request body must be a JSON object")

    max_length = settings.comment_max_length if max_comment_length is None else max_comment_length

    return ReviewSubmission(
        faculty_id=_validate_faculty_id(payload.get("facultyId")),
        rating=_validate_rating(payload.get("rating")),
        comment=_validate_comment(payload.get("comment"), max_length),
    )

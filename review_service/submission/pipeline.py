"""
pipeline.py — validate → throttle → write
=========================================
One call per incoming request; no state survives between calls except
what the stores hold.

    Received → Validating ─┬→ Rejected(400)
                           └→ RateChecking ─┬→ Rejected(429)
                                            └→ Writing ─┬→ Failed(500)
                                                        └→ RateUpdating (best effort) → Accepted(200)
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from ..errors import ReviewServiceError
from ..schemas import ReviewRead
from ..telemetry.logger import log_submission
from .client_key import client_key_for
from .throttle import check_throttle
from .validator import validate_submission
from .writer import write_review


def process_submission(
    payload: Any,
    headers: Mapping[str, str],
    now: Optional[datetime] = None,
) -> ReviewRead:
    """
    Run one submission through the pipeline and return the stored review.

    Raises a ReviewServiceError subclass for every rejected or failed
    request; nothing is written on 400 or 429.
    """
    faculty_id = payload.get("facultyId") if isinstance(payload, Mapping) else None
    client_key: Optional[str] = None

    try:
        submission = validate_submission(payload)

        client_key = client_key_for(headers)
        now = now or datetime.now(timezone.utc)
        check_throttle(client_key, now)

        review = write_review(submission, client_key, now)
    except ReviewServiceError as exc:
        log_submission(exc.status_code, faculty_id, client_key, exc.message)
        raise

    log_submission(200, review.faculty_id, client_key, review_id=review.id)
    return review

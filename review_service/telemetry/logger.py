"""
telemetry/logger.py — Submission outcome logging
================================================
One log line per submission request. Only a prefix of the client key
is recorded; the resolved address and the hashing secret never reach
the logs.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

logger = logging.getLogger("reviews.submission")

_OUTCOMES = {
    200: "accepted",
    400: "rejected",
    429: "throttled",
}

KEY_PREFIX_LENGTH = 12


def log_submission(
    status_code: int,
    faculty_id: Any,
    client_key: Optional[str],
    message: Optional[str] = None,
    review_id: Optional[str] = None,
) -> None:
    outcome = _OUTCOMES.get(status_code, "failed")
    extra = {
        "outcome": outcome,
        "status_code": status_code,
        "faculty_id": str(faculty_id)[:255] if faculty_id is not None else None,
        "client_key": client_key[:KEY_PREFIX_LENGTH] if client_key else None,
        "review_id": review_id,
    }
    level = logging.ERROR if outcome == "failed" else logging.INFO
    logger.log(
        level,
        "Review submission %s (%s)%s",
        outcome,
        status_code,
        f": {message}" if message else "",
        extra=extra,
    )

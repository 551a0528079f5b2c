"""
writer.py — Stage 3: persist the review, then the throttle bookkeeping
======================================================================
Two phases with deliberately different failure handling:

  1. insert the Review     must succeed, else PersistenceFailure (500)
                           and the rate-limit record is left untouched
  2. upsert the RateLimit  best effort; a failure is logged and the
                           already-saved review is still returned

A lost phase-2 write lets that client's next request skip the cooldown.
"""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from .. import rate_limit_store, review_store
from ..errors import PersistenceFailure
from ..schemas import ReviewRead, ReviewSubmission

logger = logging.getLogger("reviews.writer")


def write_review(submission: ReviewSubmission, client_key: str, now: datetime) -> ReviewRead:
    try:
        review = review_store.insert_review(submission)
    except SQLAlchemyError as exc:
        logger.exception("Review insert error for faculty_id=%s: %s", submission.faculty_id, exc)
        raise PersistenceFailure("Failed to submit review") from exc

    try:
        rate_limit_store.record_submission(client_key, now)
    except Exception as exc:
        # Bookkeeping only; the review is already committed
        logger.warning(
            "Rate limit update error for key=%s: %s (review %s kept)",
            client_key[:12], exc, review.id,
        )

    return review

"""
throttle.py — Stage 2: minimum interval between accepted submissions
====================================================================
A client key may have one accepted review per cooldown window. The
decision reads the persisted record once; rejection writes nothing.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from .. import rate_limit_store
from ..config import settings
from ..errors import PersistenceFailure, SubmissionThrottled
from ..rate_limit_store import RateLimitSnapshot

logger = logging.getLogger("reviews.throttle")


def remaining_wait_minutes(
    last_submission_at: datetime,
    now: datetime,
    cooldown_minutes: int,
) -> int:
    """
    Whole minutes, rounded up, until the cooldown expires. 0 means the
    client may submit. A record stamped in the future (clock skew)
    counts as zero elapsed, never more than the full cooldown.
    """
    elapsed = max((now - last_submission_at).total_seconds() / 60.0, 0.0)
    if elapsed >= cooldown_minutes:
        return 0
    return math.ceil(cooldown_minutes - elapsed)


def check_throttle(
    client_key: str,
    now: datetime,
    cooldown_minutes: Optional[int] = None,
) -> Optional[RateLimitSnapshot]:
    """
    Raise SubmissionThrottled if client_key submitted within the cooldown.

    Returns the record that was read (None for a first-time client).
    A store failure here is fatal: without the record there is no
    decision to make.
    """
    cooldown = settings.review_cooldown_minutes if cooldown_minutes is None else cooldown_minutes

    try:
        record = rate_limit_store.get_rate_limit(client_key)
    except SQLAlchemyError as exc:
        logger.exception("Rate limit lookup failed: %s", exc)
        raise PersistenceFailure("Failed to submit review") from exc

    if record is None:
        return None

    wait = remaining_wait_minutes(record.last_submission_at, now, cooldown)
    if wait > 0:
        raise SubmissionThrottled(wait)
    return record

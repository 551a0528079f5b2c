"""
rate_limit_store.py — Persisted throttling records
==================================================
Narrow get / upsert interface over the rate_limits table. Each request
reads the record once and, if accepted, writes it once; nothing is
cached in-process, so every worker sees the same state.

The upsert is a single INSERT .. ON CONFLICT DO UPDATE statement, so
concurrent writers for the same key cannot lose an increment. The
read-then-decide step in the throttle is not atomic with it: two
simultaneous first requests from one key can both be accepted.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from .database import db_session
from .models import RateLimit, as_utc

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass
class RateLimitSnapshot:
    client_key: str
    last_submission_at: datetime
    submission_count: int


def get_rate_limit(client_key: str) -> Optional[RateLimitSnapshot]:
    """Return the throttling record for a client key, or None if it has none."""
    with db_session() as session:
        row = session.get(RateLimit, client_key)
        if row is None:
            return None
        return RateLimitSnapshot(
            client_key=row.client_key,
            last_submission_at=as_utc(row.last_submission_at),
            submission_count=row.submission_count,
        )


def record_submission(client_key: str, at: datetime) -> None:
    """
    Insert the record with count 1, or bump the existing one: set
    last_submission_at and increment submission_count in place.

    Dialects without ON CONFLICT support fall back to get-or-create
    under a row lock where the backend has one.
    """
    with db_session() as session:
        insert = _UPSERT_DIALECTS.get(session.get_bind().dialect.name)
        if insert is None:
            _get_or_create_and_bump(session, client_key, at)
            return

        stmt = insert(RateLimit).values(
            client_key=client_key,
            last_submission_at=at,
            submission_count=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[RateLimit.client_key],
            set_={
                "last_submission_at": stmt.excluded.last_submission_at,
                "submission_count": RateLimit.submission_count + 1,
            },
        )
        session.execute(stmt)


def _get_or_create_and_bump(session: Session, client_key: str, at: datetime) -> None:
    row = session.execute(
        select(RateLimit).where(RateLimit.client_key == client_key).with_for_update()
    ).scalar_one_or_none()
    if row is None:
        session.add(RateLimit(client_key=client_key, last_submission_at=at, submission_count=1))
        return
    row.last_submission_at = at
    row.submission_count = RateLimit.submission_count + 1

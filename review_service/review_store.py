"""
review_store.py — Review persistence
====================================
Reviews are append-only from the submission path: inserted once with a
server-generated id and timestamp, never updated. The only removal is
delete_review, reached from the admin moderation routes.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select

from .database import db_session
from .models import Review
from .schemas import ReviewRead, ReviewSubmission


def insert_review(submission: ReviewSubmission) -> ReviewRead:
    with db_session() as session:
        row = Review(
            faculty_id=submission.faculty_id,
            rating=submission.rating,
            comment=submission.comment,
        )
        session.add(row)
        session.flush()
        return ReviewRead.model_validate(row)


def list_reviews_for_faculty(faculty_id: str) -> List[ReviewRead]:
    """All reviews of one faculty member, newest first."""
    return list_reviews(faculty_id=faculty_id, limit=None)


def list_recent_reviews(limit: int = 20) -> List[ReviewRead]:
    return list_reviews(limit=limit)


def list_reviews(
    faculty_id: Optional[str] = None,
    limit: Optional[int] = 50,
    offset: int = 0,
) -> List[ReviewRead]:
    stmt = select(Review).order_by(Review.created_at.desc(), Review.id.desc())
    if faculty_id is not None:
        stmt = stmt.where(Review.faculty_id == faculty_id)
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)

    with db_session() as session:
        rows = session.execute(stmt).scalars().all()
        return [ReviewRead.model_validate(r) for r in rows]


def count_reviews(faculty_id: Optional[str] = None) -> int:
    stmt = select(func.count()).select_from(Review)
    if faculty_id is not None:
        stmt = stmt.where(Review.faculty_id == faculty_id)
    with db_session() as session:
        return session.execute(stmt).scalar_one()


def rating_totals() -> List[Tuple[str, int, int]]:
    """(faculty_id, review count, rating sum) for every reviewed faculty member."""
    stmt = (
        select(Review.faculty_id, func.count(Review.id), func.sum(Review.rating))
        .group_by(Review.faculty_id)
    )
    with db_session() as session:
        return [(fid, int(total), int(total_sum)) for fid, total, total_sum in session.execute(stmt).all()]


def delete_review(review_id: str) -> bool:
    with db_session() as session:
        result = session.execute(delete(Review).where(Review.id == review_id))
        return result.rowcount > 0

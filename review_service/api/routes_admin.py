from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from .. import review_store
from ..auth.dependencies import require_admin
from ..models import AdminUser
from ..schemas import ReviewPage

logger = logging.getLogger("reviews.admin")

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/reviews", response_model=ReviewPage)
def list_reviews(
    faculty_id: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _user: AdminUser = Depends(require_admin),
) -> ReviewPage:
    """Moderation queue: every review, newest first, optionally for one faculty member."""
    return ReviewPage(
        items=review_store.list_reviews(faculty_id=faculty_id, limit=limit, offset=offset),
        total=review_store.count_reviews(faculty_id=faculty_id),
        limit=limit,
        offset=offset,
    )


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: str,
    user: AdminUser = Depends(require_admin),
) -> Response:
    """Permanently remove a review. Rate-limit records are not touched."""
    if not review_store.delete_review(review_id):
        raise HTTPException(status_code=404, detail="Review not found.")
    logger.info("Review %s deleted by %s", review_id, user.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

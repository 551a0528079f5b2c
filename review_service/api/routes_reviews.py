from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Query

from .. import review_store
from ..schemas import FacultyStats, ReviewRead
from ..stats import stats_by_faculty

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("", response_model=List[ReviewRead])
def list_faculty_reviews(
    faculty_id: str = Query(..., min_length=1, description="Directory id of the faculty member."),
) -> List[ReviewRead]:
    """All reviews of one faculty member, newest first."""
    return review_store.list_reviews_for_faculty(faculty_id)


@router.get("/recent", response_model=List[ReviewRead])
def recent_reviews(limit: int = Query(20, ge=1, le=100)) -> List[ReviewRead]:
    """Newest reviews across the whole directory."""
    return review_store.list_recent_reviews(limit)


@router.get("/stats", response_model=Dict[str, FacultyStats])
def review_stats() -> Dict[str, FacultyStats]:
    """Per-faculty review count, rating sum and average, keyed by faculty_id."""
    return stats_by_faculty(review_store.rating_totals())

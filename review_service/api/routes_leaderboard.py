from __future__ import annotations

from fastapi import APIRouter, Query

from .. import review_store
from ..schemas import LeaderboardRead
from ..stats import build_leaderboard, stats_by_faculty

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardRead)
def leaderboard(
    limit: int = Query(10, ge=1, le=500),
    min_reviews: int = Query(1, ge=1),
) -> LeaderboardRead:
    """Top-rated faculty, overall totals and the rating distribution."""
    stats = stats_by_faculty(review_store.rating_totals())
    return build_leaderboard(stats, limit=limit, min_reviews=min_reviews)

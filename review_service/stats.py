"""
stats.py — Aggregate ratings for the directory and the leaderboard
==================================================================
Pure functions over (faculty_id, count, sum) totals so they can be
tested without a database.
"""
from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Tuple

from .schemas import FacultyStats, LeaderboardEntry, LeaderboardRead, OverallStats, RatingBucket


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def stats_by_faculty(totals: Iterable[Tuple[str, int, int]]) -> Dict[str, FacultyStats]:
    return {
        faculty_id: FacultyStats(total=total, sum=total_sum, avg=total_sum / total)
        for faculty_id, total, total_sum in totals
        if total > 0
    }


def overall_stats(stats: Dict[str, FacultyStats]) -> OverallStats:
    total = sum(s.total for s in stats.values())
    total_sum = sum(s.sum for s in stats.values())
    return OverallStats(
        total_reviews=total,
        avg_rating=total_sum / total if total else 0.0,
        faculty_with_reviews=len(stats),
    )


def rating_distribution(stats: Dict[str, FacultyStats]) -> List[RatingBucket]:
    """Review counts bucketed by each faculty member's rounded average, 5 stars first."""
    counts = {stars: 0 for stars in range(5, 0, -1)}
    for s in stats.values():
        stars = _round_half_up(s.avg)
        if stars in counts:
            counts[stars] += s.total
    return [RatingBucket(stars=stars, count=count) for stars, count in counts.items()]


def build_leaderboard(
    stats: Dict[str, FacultyStats],
    limit: Optional[int] = None,
    min_reviews: int = 1,
) -> LeaderboardRead:
    """Rank by average rating, then by number of reviews, both descending."""
    ranked = sorted(
        ((fid, s) for fid, s in stats.items() if s.total >= min_reviews),
        key=lambda item: (-item[1].avg, -item[1].total, item[0]),
    )
    if limit is not None:
        ranked = ranked[:limit]

    return LeaderboardRead(
        entries=[
            LeaderboardEntry(
                rank=i,
                faculty_id=fid,
                avg_rating=round(s.avg, 2),
                total_reviews=s.total,
            )
            for i, (fid, s) in enumerate(ranked, start=1)
        ],
        overall=overall_stats(stats),
        distribution=rating_distribution(stats),
    )

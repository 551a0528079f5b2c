from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import as_utc


# ---------------------------------------------------------------------------
# Review submission
# ---------------------------------------------------------------------------

class ReviewSubmission(BaseModel):
    """A submission that has passed validation, already normalized."""

    faculty_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ReviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    faculty_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class SubmitReviewResponse(BaseModel):
    success: bool = True
    data: ReviewRead


class ErrorResponse(BaseModel):
    error: str


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

class FacultyStats(BaseModel):
    total: int
    sum: int
    avg: float


class LeaderboardEntry(BaseModel):
    rank: int
    faculty_id: str
    avg_rating: float
    total_reviews: int


class OverallStats(BaseModel):
    total_reviews: int = 0
    avg_rating: float = 0.0
    faculty_with_reviews: int = 0


class RatingBucket(BaseModel):
    stars: int = Field(..., ge=1, le=5)
    count: int = 0


class LeaderboardRead(BaseModel):
    entries: List[LeaderboardEntry] = Field(default_factory=list)
    overall: OverallStats
    distribution: List[RatingBucket] = Field(
        default_factory=list,
        description=(
            "Five buckets, 5 stars first. Each faculty member's rounded average "
            "contributes their review count to the matching bucket."
        ),
    )


# ---------------------------------------------------------------------------
# Moderation
# ---------------------------------------------------------------------------

class ReviewPage(BaseModel):
    items: List[ReviewRead] = Field(default_factory=list)
    total: int
    limit: int
    offset: int

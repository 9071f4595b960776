"""Pydantic schemas per i voti arbitri."""

from datetime import datetime
from typing import Any

from app.schemas.base import CamelModel


class RatingSubmitRequest(CamelModel):
    # Validazione 1..5 nel RatingAggregator: errore 400 uniforme, non 422.
    rating: Any = None
    comment: str | None = None


class RecentCommentItem(CamelModel):
    rating: int
    comment: str
    created_at: datetime


class RatingSummaryResponse(CamelModel):
    total_ratings: int
    average_rating: float
    distribution: dict[int, int]
    recent_comments: list[RecentCommentItem]
    user_rating: int | None = None


class RatingSubmitResponse(CamelModel):
    success: bool
    rating: int
    total_ratings: int
    average_rating: float

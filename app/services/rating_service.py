"""
Voti anonimi degli arbitri.
L'identity_hash arriva già calcolato dal chiamante: qui è solo una chiave
di deduplicazione opaca. Un solo voto per (arbitro, identità), sovrascritto
ad ogni nuovo invio.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from app.analytics.rounding import round_half_up
from app.core.errors import NotFoundError, ValidationError
from app.repositories.base import RatingRepository

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 500
RECENT_COMMENTS_LIMIT = 10


@dataclass(frozen=True)
class RecentComment:
    rating: int
    comment: str
    created_at: datetime


@dataclass(frozen=True)
class RatingSummary:
    total_ratings: int
    average_rating: float
    distribution: dict[int, int]
    recent_comments: list[RecentComment] = field(default_factory=list)
    user_rating: int | None = None


@dataclass(frozen=True)
class SubmitResult:
    rating: int
    total_ratings: int
    average_rating: float
    summary: RatingSummary


def validate_rating(rating) -> int:
    """Intero 1-5; accetta anche float interi (4.0) come arrivano da JSON."""
    if isinstance(rating, float) and rating.is_integer():
        rating = int(rating)
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be an integer between 1 and 5")
    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValidationError("Rating must be between 1 and 5")
    return rating


def sanitize_comment(comment: str | None) -> str | None:
    """Trim e troncamento a 500 caratteri; vuoto -> None."""
    if comment is None:
        return None
    cleaned = str(comment).strip()[:MAX_COMMENT_LENGTH]
    return cleaned or None


class RatingAggregator:
    def __init__(self, repository: RatingRepository):
        self._repo = repository

    def _require_referee(self, referee_id: int) -> None:
        if not self._repo.referee_exists(referee_id):
            raise NotFoundError(f"Referee {referee_id} not found")

    def submit(
        self,
        referee_id: int,
        rating: int,
        comment: str | None,
        identity_hash: str,
    ) -> SubmitResult:
        rating = validate_rating(rating)
        if not identity_hash:
            raise ValidationError("identity hash is required")
        self._require_referee(referee_id)

        saved = self._repo.upsert_rating(referee_id, identity_hash, rating, sanitize_comment(comment))
        summary = self.summary(referee_id, identity_hash)
        logger.info(
            "Voto arbitro %s salvato: rating=%s, totale=%s, media=%s",
            referee_id, saved.rating, summary.total_ratings, summary.average_rating,
        )
        return SubmitResult(
            rating=saved.rating,
            total_ratings=summary.total_ratings,
            average_rating=summary.average_rating,
            summary=summary,
        )

    def summary(self, referee_id: int, identity_hash: str | None = None) -> RatingSummary:
        self._require_referee(referee_id)
        ratings = self._repo.list_ratings(referee_id)

        total = len(ratings)
        average = round_half_up(sum(r.rating for r in ratings) / total, 1) if total else 0.0
        distribution = {value: 0 for value in range(MIN_RATING, MAX_RATING + 1)}
        for r in ratings:
            if r.rating in distribution:
                distribution[r.rating] += 1

        recent = [
            RecentComment(rating=r.rating, comment=r.comment, created_at=r.created_at)
            for r in ratings
            if r.comment and r.comment.strip()
        ][:RECENT_COMMENTS_LIMIT]

        user_rating = None
        if identity_hash:
            mine = self._repo.get_rating(referee_id, identity_hash)
            user_rating = mine.rating if mine else None

        return RatingSummary(
            total_ratings=total,
            average_rating=average,
            distribution=distribution,
            recent_comments=recent,
            user_rating=user_rating,
        )

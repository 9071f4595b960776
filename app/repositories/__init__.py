from app.repositories.base import RatingRepository, StatsRepository
from app.repositories.rating_repository import SqlRatingRepository
from app.repositories.stats_repository import SqlStatsRepository

__all__ = [
    "StatsRepository",
    "RatingRepository",
    "SqlStatsRepository",
    "SqlRatingRepository",
]

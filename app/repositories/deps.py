"""Dependency FastAPI per i repository (sovrascrivibili nei test)."""

from app.core.database import SessionLocal, get_engine
from app.repositories.rating_repository import SqlRatingRepository
from app.repositories.stats_repository import SqlStatsRepository


def get_stats_repository() -> SqlStatsRepository:
    get_engine()
    return SqlStatsRepository(SessionLocal)


def get_rating_repository() -> SqlRatingRepository:
    get_engine()
    return SqlRatingRepository(SessionLocal)

"""SQLAlchemy engine (lazy), session factory e init."""

import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import get_database_url

logger = logging.getLogger(__name__)

SessionLocal = sessionmaker(autocommit=False, autoflush=False)
Base = declarative_base()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """
    Engine creato al primo uso, non all'import: i modelli e l'analytics
    si importano anche senza DATABASE_URL (test, script).
    """
    engine = create_engine(
        get_database_url(),
        pool_pre_ping=True,
        echo=False,
    )
    SessionLocal.configure(bind=engine)
    return engine


def init_db() -> None:
    """
    Crea tutte le tabelle.
    I modelli devono essere importati prima per registrare i metadata.
    """
    from app.models import (  # noqa: F401
        card_event,
        league,
        match,
        match_stats,
        referee,
        referee_rating,
        referee_season_stats,
        team,
    )

    Base.metadata.create_all(bind=get_engine())
    logger.info("create_all completato")

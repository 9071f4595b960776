"""Shared fixtures: fake stores for analytics, in-memory SQLite for repositories."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.models import CardEvent, League, Match, MatchStats, Referee, Team
from tests.fakes import FakeRatingRepository, FakeStatsRepository


@pytest.fixture
def stats_repo():
    return FakeStatsRepository()


@pytest.fixture
def rating_repo():
    return FakeRatingRepository(referee_ids={1, 2})


@pytest.fixture
def session_factory():
    """SQLite in memoria condiviso tra sessioni (StaticPool)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    db = session_factory()
    db.add_all([
        League(id=1, api_id=135, name="Serie A", country="Italy"),
        Team(id=10, api_id=489, name="Milan", league_id=1),
        Team(id=20, api_id=505, name="Inter", league_id=1),
        Referee(id=1, name="Daniele Orsato", slug="daniele-orsato"),
    ])
    yellows = [(1, 1), (2, 1), (0, 1), (2, 2)]
    reds = [0, 1, 0, 0]
    for i, ((hy, ay), r) in enumerate(zip(yellows, reds), start=1):
        db.add(Match(
            id=i, league_id=1, season=2025, date=datetime(2024, 9, i),
            status="FT", home_team_id=10, away_team_id=20, referee_id=1,
        ))
        db.add(MatchStats(
            id=i, match_id=i,
            yellow_cards=hy + ay, red_cards=r,
            home_yellow_cards=hy, away_yellow_cards=ay, away_red_cards=r,
            fouls=20, home_fouls=10, away_fouls=10,
        ))
    # Partita non conclusa: esclusa da tutte le letture
    db.add(Match(
        id=5, league_id=1, season=2025, date=datetime(2024, 10, 1),
        status="NS", home_team_id=20, away_team_id=10, referee_id=1,
    ))
    # Conclusa ma senza stats
    db.add(Match(
        id=6, league_id=1, season=2025, date=datetime(2024, 10, 8),
        status="Match Finished", home_team_id=20, away_team_id=10, referee_id=1,
    ))
    db.add(CardEvent(match_stats_id=1, minute=12, type="yellow", team_side="home"))
    db.commit()
    db.close()
    return session_factory


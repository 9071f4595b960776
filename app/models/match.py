"""Match ORM model (fixture grezza)."""

import enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.core.database import Base

# Codici stato upstream che indicano una partita conclusa.
FINISHED_STATUSES = ("FT", "AET", "PEN", "Match Finished")
SCHEDULED_STATUSES = ("NS", "TBD", "Not Started", "Scheduled")


class MatchStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    FINISHED = "finished"
    OTHER = "other"

    @classmethod
    def classify(cls, raw: str | None) -> "MatchStatus":
        if raw in FINISHED_STATUSES:
            return cls.FINISHED
        if raw in SCHEDULED_STATUSES:
            return cls.SCHEDULED
        return cls.OTHER


class Match(Base):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    api_id = Column(Integer, unique=True, nullable=True, index=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False, index=True)
    season = Column(Integer, nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    round = Column(String(64), nullable=True)
    status = Column(String(32), nullable=True)
    home_team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    away_team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    referee_id = Column(Integer, ForeignKey("referees.id"), nullable=True, index=True)
    home_goals = Column(Integer, nullable=True)
    away_goals = Column(Integer, nullable=True)

    league = relationship("League", backref="matches")
    home_team = relationship("Team", foreign_keys=[home_team_id])
    away_team = relationship("Team", foreign_keys=[away_team_id])
    referee = relationship("Referee", backref="matches")
    stats = relationship("MatchStats", back_populates="match", uselist=False)

    __table_args__ = (
        Index("ix_matches_referee_season", "referee_id", "season"),
    )

"""Squadra. Le combo arbitro-squadra e i cartellini ricevuti si leggono da matches/match_stats."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.core.database import Base


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    api_id = Column(Integer, unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    short_name = Column(String(32), nullable=True)
    logo = Column(String(512), nullable=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=True, index=True)

    league = relationship("League", backref="teams")

"""
Statistiche disciplinari di una partita conclusa, con split casa/trasferta.
Uno-a-uno con Match; può mancare anche per partite FT (buco dati upstream).
"""

from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.orm import relationship

from app.core.database import Base


class MatchStats(Base):
    __tablename__ = "match_stats"

    id = Column(Integer, primary_key=True, index=True)
    match_id = Column(
        Integer,
        ForeignKey("matches.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    # --- TOTALI ---
    yellow_cards = Column(Integer, nullable=False, default=0)
    red_cards = Column(Integer, nullable=False, default=0)
    fouls = Column(Integer, nullable=False, default=0)
    penalties = Column(Integer, nullable=False, default=0)

    # --- CASA ---
    home_yellow_cards = Column(Integer, nullable=False, default=0)
    home_red_cards = Column(Integer, nullable=False, default=0)
    home_fouls = Column(Integer, nullable=False, default=0)
    home_penalties = Column(Integer, nullable=False, default=0)

    # --- TRASFERTA ---
    away_yellow_cards = Column(Integer, nullable=False, default=0)
    away_red_cards = Column(Integer, nullable=False, default=0)
    away_fouls = Column(Integer, nullable=False, default=0)
    away_penalties = Column(Integer, nullable=False, default=0)

    match = relationship("Match", back_populates="stats")

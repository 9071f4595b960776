"""
Statistiche derivate arbitro: una riga per arbitro per stagione per lega.
Scritte solo dallo StatsAggregator, sostituite per intero ad ogni ricalcolo.
Nessun timestamp: la riga è funzione pura delle partite concluse.
"""

from sqlalchemy import Column, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.database import Base


class RefereeSeasonStats(Base):
    __tablename__ = "referee_season_stats"

    id = Column(Integer, primary_key=True, index=True)
    referee_id = Column(Integer, ForeignKey("referees.id", ondelete="CASCADE"), nullable=False, index=True)
    season = Column(Integer, nullable=False, index=True)
    league_api_id = Column(Integer, nullable=False, index=True)

    # --- CONTEGGI ---
    matches_officiated = Column(Integer, nullable=False)
    matches_with_stats = Column(Integer, nullable=False)
    total_yellow_cards = Column(Integer, nullable=False)
    total_red_cards = Column(Integer, nullable=False)

    # --- MEDIE / INDICI ---
    avg_yellow_cards = Column(Float, nullable=False)
    avg_red_cards = Column(Float, nullable=False)
    strictness_index = Column(Float, nullable=False)
    home_bias_score = Column(Float, nullable=False)

    # --- RELAZIONI ---
    referee = relationship("Referee", backref="season_stats")

    # --- VINCOLI ---
    __table_args__ = (
        UniqueConstraint(
            "referee_id", "season", "league_api_id",
            name="uq_referee_season_stats_key",
        ),
    )

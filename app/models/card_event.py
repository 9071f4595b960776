"""
Cartellini di una partita: minuto, tipo (yellow/red), lato squadra, giocatore.
Solo dettaglio per evento; gli aggregati usano MatchStats.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.core.database import Base


class CardEvent(Base):
    __tablename__ = "card_events"

    id = Column(Integer, primary_key=True, index=True)
    match_stats_id = Column(
        Integer, ForeignKey("match_stats.id", ondelete="CASCADE"),
        nullable=False,
    )
    minute = Column(Integer, nullable=False)
    extra_minute = Column(Integer, nullable=True)
    type = Column(String(16), nullable=False)
    team_side = Column(String(8), nullable=False)
    player_name = Column(String(255), nullable=True)

    # --- Relazioni ---
    match_stats = relationship("MatchStats", backref="card_events")

    # --- Indici ---
    __table_args__ = (
        Index("ix_card_events_match_stats_id", "match_stats_id"),
        Index("ix_card_events_type", "type"),
    )

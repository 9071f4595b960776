"""
Competizione. api_id è l'id upstream ed è la chiave di lega usata in
referee_season_stats e nelle API (/api/leagues/{api_id}/...).
"""

from sqlalchemy import Column, Integer, String

from app.core.database import Base


class League(Base):
    __tablename__ = "leagues"

    id = Column(Integer, primary_key=True, index=True)
    api_id = Column(Integer, unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    country = Column(String(255), nullable=False)
    logo = Column(String(512), nullable=True)

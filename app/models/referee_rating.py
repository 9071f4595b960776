"""Voto anonimo di un arbitro. Una riga per (arbitro, identità hashata)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from app.core.database import Base


class RefereeRating(Base):
    __tablename__ = "referee_ratings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    referee_id = Column(Integer, ForeignKey("referees.id", ondelete="CASCADE"), nullable=False, index=True)
    ip_hash = Column(String(64), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("referee_id", "ip_hash", name="uq_referee_ratings_referee_ip"),
    )

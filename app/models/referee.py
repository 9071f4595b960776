"""Referee ORM model. Anagrafica arbitro, popolata dall'ingestion upstream."""

from sqlalchemy import Column, Integer, String

from app.core.database import Base


class Referee(Base):
    __tablename__ = "referees"

    id = Column(Integer, primary_key=True, index=True)
    api_id = Column(Integer, unique=True, nullable=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    nationality = Column(String(128), nullable=True)
    photo = Column(String(512), nullable=True)

from app.core.config import get_current_season, get_database_url
from app.core.database import Base, SessionLocal, get_engine, init_db

__all__ = [
    "get_current_season",
    "get_database_url",
    "Base",
    "SessionLocal",
    "get_engine",
    "init_db",
]

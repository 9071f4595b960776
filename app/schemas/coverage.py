"""Pydantic schemas per la copertura dati stagionale."""

from datetime import datetime

from app.schemas.base import CamelModel


class IncompleteMatchItem(CamelModel):
    match_id: int
    date: datetime | None = None
    home_team: str
    away_team: str
    referee: str | None = None


class DataCoverageResponse(CamelModel):
    season: int
    finished_matches: int
    matches_with_stats: int
    matches_with_referee: int
    coverage_percentage: float
    matches_missing_stats: int
    incomplete_matches: list[IncompleteMatchItem]

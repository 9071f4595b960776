"""Risposta del job schedulato di ricalcolo."""

from app.schemas.base import CamelModel


class UpdateStatsResponse(CamelModel):
    success: bool
    referees_updated: int
    duration_ms: int
    error: str | None = None

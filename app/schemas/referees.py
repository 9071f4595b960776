"""Pydantic schemas per bias, tolleranza falli, rigori, forma, timing e statistiche stagionali."""

from datetime import datetime

from app.schemas.base import CamelModel


class InsufficientDataResponse(CamelModel):
    """Nessun segnale: supporto sotto soglia. Risposta 200, non errore."""
    status: str = "insufficient_data"
    entity_id: int | None = None
    matches: int
    required: int


class BiasResponse(CamelModel):
    status: str = "ok"
    referee_id: int
    match_count: int
    home_yellow: int
    away_yellow: int
    home_red: int
    away_red: int
    avg_home_cards: float
    avg_away_cards: float
    bias_score: float
    bias_percent: float


class BiasRankingResponse(CamelModel):
    season: int | None = None
    referees: list[BiasResponse]


class LeniencyResponse(CamelModel):
    status: str = "ok"
    entity_id: int
    match_count: int
    total_fouls: int
    home_fouls: int
    away_fouls: int
    total_yellow: int
    total_red: int
    avg_fouls: float
    avg_yellow: float
    foul_to_card_ratio: float
    leniency_score: float
    home_foul_percent: float


class LeniencyOverviewResponse(CamelModel):
    season: int | None = None
    referees: list[LeniencyResponse]
    leagues: list[LeniencyResponse]
    total_matches: int
    total_fouls: int
    avg_fouls: float
    avg_foul_to_card: float


class PeriodCountItem(CamelModel):
    period: str
    yellow: int
    red: int
    total: int


class CardTimingResponse(CamelModel):
    status: str = "ok"
    referee_id: int
    total: int
    matches: int
    first_half: int
    second_half: int
    injury_time: int
    early_cards: int
    late_cards: int
    periods: list[PeriodCountItem]


class RefereeSeasonStatsItem(CamelModel):
    referee_id: int
    season: int
    league_api_id: int
    matches_officiated: int
    matches_with_stats: int
    total_yellow_cards: int
    total_red_cards: int
    avg_yellow_cards: float
    avg_red_cards: float
    strictness_index: float
    home_bias_score: float
    stats_coverage: float
    data_complete: bool


class PenaltyMatchItem(CamelModel):
    match_id: int
    date: datetime | None = None
    home_team_id: int
    away_team_id: int
    home_penalties: int
    away_penalties: int
    total: int


class RefereePenaltyResponse(CamelModel):
    status: str = "ok"
    referee_id: int
    matches_officiated: int
    match_count: int
    total_penalties: int
    home_penalties: int
    away_penalties: int
    avg_penalties: float
    penalty_rate: float
    multi_penalty_rate: float
    matches_with_penalty: int
    matches_with_multiple: int
    home_bias: float
    recent_penalty_matches: list[PenaltyMatchItem]


class LeaguePenaltyItem(CamelModel):
    league_api_id: int
    match_count: int
    total_penalties: int
    avg_penalties: float


class PenaltyOverviewResponse(CamelModel):
    season: int | None = None
    referees: list[RefereePenaltyResponse]
    leagues: list[LeaguePenaltyItem]
    total_matches: int
    total_penalties: int
    avg_penalties: float
    matches_with_penalty: int


class RefereeFormResponse(CamelModel):
    referee_id: int
    season: int | None = None
    trend: str
    trend_score: float
    avg_recent: float
    avg_season: float
    volatility: float
    form_rating: int
    matches: int
    recent_match_ids: list[int]

"""Pydantic schemas per probabilità over/under, EV, raccomandazioni e combo arbitro-squadra."""

from pydantic import Field

from app.schemas.base import CamelModel


class OverUnderResponse(CamelModel):
    lambda_: float = Field(alias="lambda")
    threshold: float
    p_over: float
    p_under: float
    odds: float | None = None
    ev: float | None = None
    is_value: bool | None = None


class LineItem(CamelModel):
    threshold: float
    p_over: float
    p_under: float


class ValueSignalItem(CamelModel):
    market: str
    threshold: float
    probability: float
    odds: float
    ev: float
    is_value: bool


class RecommendationItem(CamelModel):
    primary_pick: str
    odds_range: str | None = None
    confidence: str
    reasoning: str
    alternative_picks: list[str]
    has_edge: bool


class FixturePredictionResponse(CamelModel):
    status: str = "ok"
    referee_id: int
    home_team_id: int
    away_team_id: int
    season: int
    league_api_id: int | None = None
    expected_cards: float
    threshold: float
    p_over: float
    p_under: float
    lines: list[LineItem]
    confidence: str
    confidence_score: int
    used_prior: bool
    stats_coverage: float
    signals: list[ValueSignalItem]
    recommendation: RecommendationItem


class ComboItem(CamelModel):
    referee_id: int
    team_id: int
    matches: int
    yellow_cards: int
    red_cards: int
    avg_yellow_cards: float
    avg_red_cards: float
    over25_rate: float
    over35_rate: float
    over45_rate: float
    over_rate: float


class ComboListResponse(CamelModel):
    threshold: float
    season: int | None = None
    combos: list[ComboItem]


class CompatibilityResponse(CamelModel):
    referee_id: int
    team_id: int
    season: int | None = None
    score: int
    rating: str
    card_tendency: str
    historical_matches: int
    avg_cards_in_history: float
    deviation_percent: float
    win_rate: float
    referee_avg_yellow: float
    team_avg_yellow: float

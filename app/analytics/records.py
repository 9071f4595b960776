"""
Record in-memory letti dallo store.
L'analytics lavora solo su questi dataclass, mai sulle sessioni ORM:
i calcoli restano funzioni pure e testabili con store finti.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import NamedTuple


class SeasonLeagueKey(NamedTuple):
    """Chiave composita di RefereeSeasonStats."""
    referee_id: int
    season: int
    league_api_id: int


class ComboKey(NamedTuple):
    """Coppia arbitro-squadra."""
    referee_id: int
    team_id: int


@dataclass(frozen=True)
class StatsRecord:
    yellow_cards: int = 0
    red_cards: int = 0
    fouls: int = 0
    penalties: int = 0
    home_yellow_cards: int = 0
    home_red_cards: int = 0
    home_fouls: int = 0
    home_penalties: int = 0
    away_yellow_cards: int = 0
    away_red_cards: int = 0
    away_fouls: int = 0
    away_penalties: int = 0

    @property
    def total_cards(self) -> int:
        return self.yellow_cards + self.red_cards

    @property
    def home_cards(self) -> int:
        return self.home_yellow_cards + self.home_red_cards

    @property
    def away_cards(self) -> int:
        return self.away_yellow_cards + self.away_red_cards


@dataclass(frozen=True)
class MatchRecord:
    """Partita conclusa con lega e (eventuali) statistiche già joinate."""
    id: int
    league_api_id: int
    season: int
    home_team_id: int
    away_team_id: int
    referee_id: int | None = None
    date: datetime | None = None
    stats: StatsRecord | None = None
    home_goals: int | None = None
    away_goals: int | None = None

    @property
    def has_stats(self) -> bool:
        return self.stats is not None

    def result_for(self, team_id: int) -> str | None:
        """Esito per la squadra ("win", "draw" o "loss"); None senza risultato."""
        if self.home_goals is None or self.away_goals is None:
            return None
        own, other = (
            (self.home_goals, self.away_goals) if team_id == self.home_team_id
            else (self.away_goals, self.home_goals)
        )
        if own > other:
            return "win"
        if own < other:
            return "loss"
        return "draw"


@dataclass(frozen=True)
class CardEventRecord:
    match_id: int
    referee_id: int | None
    minute: int
    type: str
    team_side: str
    extra_minute: int | None = None
    player_name: str | None = None

    @property
    def is_yellow(self) -> bool:
        return self.type == "yellow"


@dataclass(frozen=True)
class RefereeSeasonRow:
    """Valori completi di una riga RefereeSeasonStats (sostituzione integrale)."""
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

    @property
    def key(self) -> SeasonLeagueKey:
        return SeasonLeagueKey(self.referee_id, self.season, self.league_api_id)

    @property
    def stats_coverage(self) -> float:
        """Quota di partite dirette con statistiche presenti (0-1)."""
        if self.matches_officiated == 0:
            return 0.0
        return self.matches_with_stats / self.matches_officiated

    @property
    def data_complete(self) -> bool:
        return self.matches_with_stats == self.matches_officiated


@dataclass(frozen=True)
class RatingRecord:
    referee_id: int
    identity_hash: str
    rating: int
    comment: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class InsufficientData:
    """Risultato "nessun segnale": supporto sotto la soglia minima. Non è un errore."""
    entity_id: int | None
    matches: int
    required: int
    reason: str = "insufficient_data"
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class IncompleteMatch:
    match_id: int
    date: datetime | None
    home_team: str
    away_team: str
    referee: str | None


@dataclass(frozen=True)
class DataCoverage:
    season: int
    finished_matches: int = 0
    matches_with_stats: int = 0
    matches_with_referee: int = 0
    incomplete_matches: list[IncompleteMatch] = field(default_factory=list)

    @property
    def matches_missing_stats(self) -> int:
        return self.finished_matches - self.matches_with_stats

    @property
    def coverage_percentage(self) -> float:
        if self.finished_matches == 0:
            return 0.0
        return self.matches_with_stats / self.finished_matches * 100

"""
Tolleranza falli per arbitro e per lega.

foul_to_card_ratio = falli totali / cartellini totali; senza cartellini si
ripiega sulla media falli per partita. Più alto = più falli prima di un cartellino.
Si considerano solo partite con fouls > 0.
"""

from dataclasses import dataclass

from app.analytics.records import InsufficientData, MatchRecord, StatsRecord
from app.repositories.base import StatsRepository

MIN_MATCHES_WITH_FOULS = 5


@dataclass(frozen=True)
class LeniencyResult:
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

    @property
    def total_cards(self) -> int:
        return self.total_yellow + self.total_red


@dataclass(frozen=True)
class LeniencyOverview:
    referees: list[LeniencyResult]
    leagues: list[LeniencyResult]
    total_matches: int
    total_fouls: int
    avg_fouls: float
    avg_foul_to_card: float


def _with_fouls(matches: list[MatchRecord]) -> list[StatsRecord]:
    return [m.stats for m in matches if m.stats is not None and m.stats.fouls > 0]


def compute_leniency(entity_id: int, matches: list[MatchRecord]) -> LeniencyResult | InsufficientData:
    stats = _with_fouls(matches)
    n = len(stats)
    if n < MIN_MATCHES_WITH_FOULS:
        return InsufficientData(entity_id=entity_id, matches=n, required=MIN_MATCHES_WITH_FOULS)

    total_fouls = sum(s.fouls for s in stats)
    home_fouls = sum(s.home_fouls for s in stats)
    away_fouls = sum(s.away_fouls for s in stats)
    total_yellow = sum(s.yellow_cards for s in stats)
    total_red = sum(s.red_cards for s in stats)
    total_cards = total_yellow + total_red

    avg_fouls = total_fouls / n
    ratio = total_fouls / total_cards if total_cards > 0 else avg_fouls

    return LeniencyResult(
        entity_id=entity_id,
        match_count=n,
        total_fouls=total_fouls,
        home_fouls=home_fouls,
        away_fouls=away_fouls,
        total_yellow=total_yellow,
        total_red=total_red,
        avg_fouls=avg_fouls,
        avg_yellow=total_yellow / n,
        foul_to_card_ratio=ratio,
        leniency_score=ratio,
        home_foul_percent=home_fouls / total_fouls * 100 if total_fouls > 0 else 50.0,
    )


def _qualified(groups: dict[int, list[MatchRecord]]) -> list[LeniencyResult]:
    out = []
    for entity_id, matches in groups.items():
        result = compute_leniency(entity_id, matches)
        if isinstance(result, LeniencyResult):
            out.append(result)
    return sorted(out, key=lambda r: (-r.avg_fouls, r.entity_id))


class FoulLeniencyAnalyzer:
    def __init__(self, repository: StatsRepository):
        self._repo = repository

    def analyze_referee(self, referee_id: int, season: int | None = None) -> LeniencyResult | InsufficientData:
        return compute_leniency(referee_id, self._repo.finished_matches(referee_id=referee_id, season=season))

    def analyze_league(self, league_api_id: int, season: int | None = None) -> LeniencyResult | InsufficientData:
        return compute_leniency(league_api_id, self._repo.finished_matches(league_api_id=league_api_id, season=season))

    def analyze_all(self, season: int | None = None) -> LeniencyOverview:
        """Panoramica: arbitri e leghe qualificati (per media falli decrescente) e totali."""
        matches = self._repo.finished_matches(season=season)
        by_referee: dict[int, list[MatchRecord]] = {}
        by_league: dict[int, list[MatchRecord]] = {}
        for m in matches:
            if m.referee_id is not None:
                by_referee.setdefault(m.referee_id, []).append(m)
            by_league.setdefault(m.league_api_id, []).append(m)

        stats = _with_fouls(matches)
        total_fouls = sum(s.fouls for s in stats)
        total_cards = sum(s.total_cards for s in stats)
        return LeniencyOverview(
            referees=_qualified(by_referee),
            leagues=_qualified(by_league),
            total_matches=len(stats),
            total_fouls=total_fouls,
            avg_fouls=total_fouls / len(stats) if stats else 0.0,
            avg_foul_to_card=total_fouls / total_cards if total_cards > 0 else 0.0,
        )

"""
Bias casa/trasferta per arbitro.

avg_home_cards = (Σ home_yellow + Σ home_red) / partite con stats, analogo per away.
bias_score = avg_away - avg_home: positivo = l'arbitro punisce di più gli ospiti.
"""

import logging
from dataclasses import dataclass

from app.analytics.records import InsufficientData, MatchRecord
from app.repositories.base import StatsRepository

logger = logging.getLogger(__name__)

MIN_MATCHES_WITH_STATS = 5


@dataclass(frozen=True)
class BiasResult:
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


def compute_bias_from_matches(referee_id: int, matches: list[MatchRecord]) -> BiasResult | InsufficientData:
    with_stats = [m.stats for m in matches if m.stats is not None]
    match_count = len(with_stats)
    if match_count < MIN_MATCHES_WITH_STATS:
        return InsufficientData(entity_id=referee_id, matches=match_count, required=MIN_MATCHES_WITH_STATS)

    home_yellow = sum(s.home_yellow_cards for s in with_stats)
    away_yellow = sum(s.away_yellow_cards for s in with_stats)
    home_red = sum(s.home_red_cards for s in with_stats)
    away_red = sum(s.away_red_cards for s in with_stats)

    avg_home = (home_yellow + home_red) / match_count
    avg_away = (away_yellow + away_red) / match_count
    bias_score = avg_away - avg_home
    denom = avg_home + avg_away
    bias_percent = 100 * bias_score / denom if denom != 0 else 0.0

    return BiasResult(
        referee_id=referee_id,
        match_count=match_count,
        home_yellow=home_yellow,
        away_yellow=away_yellow,
        home_red=home_red,
        away_red=away_red,
        avg_home_cards=avg_home,
        avg_away_cards=avg_away,
        bias_score=bias_score,
        bias_percent=bias_percent,
    )


class BiasCalculator:
    def __init__(self, repository: StatsRepository):
        self._repo = repository

    def compute_bias(self, referee_id: int, season: int | None = None) -> BiasResult | InsufficientData:
        matches = self._repo.finished_matches(referee_id=referee_id, season=season)
        return compute_bias_from_matches(referee_id, matches)

    def rank_bias(self, season: int | None = None) -> list[BiasResult]:
        """Tutti gli arbitri con supporto sufficiente, per |bias_score| decrescente."""
        by_referee: dict[int, list[MatchRecord]] = {}
        for m in self._repo.finished_matches(season=season, require_referee=True):
            by_referee.setdefault(m.referee_id, []).append(m)

        results = []
        for referee_id, matches in by_referee.items():
            result = compute_bias_from_matches(referee_id, matches)
            if isinstance(result, BiasResult):
                results.append(result)
        logger.info("rank_bias season=%s: %d/%d arbitri qualificati", season, len(results), len(by_referee))
        return sorted(results, key=lambda r: (-abs(r.bias_score), r.referee_id))

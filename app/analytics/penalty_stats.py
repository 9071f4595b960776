"""
Statistiche rigori per arbitro e per lega.

Un arbitro entra nella classifica con almeno MIN_MATCHES_OFFICIATED partite
concluse; le medie però si calcolano solo sulle partite con stats.
home_bias = quota di rigori assegnati in casa - 50 (positivo = favorisce i padroni di casa).
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from app.analytics.records import InsufficientData, MatchRecord
from app.repositories.base import StatsRepository

logger = logging.getLogger(__name__)

MIN_MATCHES_OFFICIATED = 5
RECENT_PENALTY_MATCHES = 5


@dataclass(frozen=True)
class PenaltyMatch:
    match_id: int
    date: datetime | None
    home_team_id: int
    away_team_id: int
    home_penalties: int
    away_penalties: int

    @property
    def total(self) -> int:
        return self.home_penalties + self.away_penalties


@dataclass(frozen=True)
class RefereePenaltyStats:
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
    recent_penalty_matches: list[PenaltyMatch]


@dataclass(frozen=True)
class LeaguePenaltyStats:
    league_api_id: int
    match_count: int
    total_penalties: int
    avg_penalties: float


@dataclass(frozen=True)
class PenaltyOverview:
    season: int | None
    referees: list[RefereePenaltyStats]
    leagues: list[LeaguePenaltyStats]
    total_matches: int
    total_penalties: int
    avg_penalties: float
    matches_with_penalty: int


def _pct(count: int, total: int) -> float:
    return count / total * 100 if total else 0.0


def _recent_key(m: MatchRecord):
    return (m.date is not None, m.date.timestamp() if m.date else 0.0, m.id)


def compute_referee_penalties(
    referee_id: int,
    matches: list[MatchRecord],
) -> RefereePenaltyStats | InsufficientData:
    if len(matches) < MIN_MATCHES_OFFICIATED:
        return InsufficientData(entity_id=referee_id, matches=len(matches), required=MIN_MATCHES_OFFICIATED)

    with_stats = [m for m in matches if m.stats is not None]
    match_count = len(with_stats)
    total = sum(m.stats.penalties for m in with_stats)
    home = sum(m.stats.home_penalties for m in with_stats)
    away = sum(m.stats.away_penalties for m in with_stats)
    with_penalty = [m for m in with_stats if m.stats.penalties > 0]
    with_multiple = sum(1 for m in with_stats if m.stats.penalties > 1)

    recent = sorted(with_penalty, key=_recent_key, reverse=True)[:RECENT_PENALTY_MATCHES]
    return RefereePenaltyStats(
        referee_id=referee_id,
        matches_officiated=len(matches),
        match_count=match_count,
        total_penalties=total,
        home_penalties=home,
        away_penalties=away,
        avg_penalties=total / match_count if match_count else 0.0,
        penalty_rate=_pct(len(with_penalty), match_count),
        multi_penalty_rate=_pct(with_multiple, match_count),
        matches_with_penalty=len(with_penalty),
        matches_with_multiple=with_multiple,
        home_bias=_pct(home, total) - 50 if total else 0.0,
        recent_penalty_matches=[
            PenaltyMatch(
                match_id=m.id,
                date=m.date,
                home_team_id=m.home_team_id,
                away_team_id=m.away_team_id,
                home_penalties=m.stats.home_penalties,
                away_penalties=m.stats.away_penalties,
            )
            for m in recent
        ],
    )


class PenaltyAnalyzer:
    def __init__(self, repository: StatsRepository):
        self._repo = repository

    def referee_penalties(self, referee_id: int, season: int | None = None) -> RefereePenaltyStats | InsufficientData:
        matches = self._repo.finished_matches(referee_id=referee_id, season=season)
        return compute_referee_penalties(referee_id, matches)

    def overview(self, season: int | None = None) -> PenaltyOverview:
        """Arbitri qualificati per avg_penalties decrescente, leghe idem, più i totali."""
        matches = self._repo.finished_matches(season=season, require_referee=True)

        by_referee: dict[int, list[MatchRecord]] = {}
        by_league: dict[int, list[MatchRecord]] = {}
        for m in matches:
            by_referee.setdefault(m.referee_id, []).append(m)
            if m.stats is not None:
                by_league.setdefault(m.league_api_id, []).append(m)

        referees = []
        for referee_id, group in by_referee.items():
            result = compute_referee_penalties(referee_id, group)
            if isinstance(result, RefereePenaltyStats):
                referees.append(result)
        referees.sort(key=lambda r: (-r.avg_penalties, r.referee_id))

        leagues = []
        for league_api_id, group in by_league.items():
            total = sum(m.stats.penalties for m in group)
            leagues.append(
                LeaguePenaltyStats(
                    league_api_id=league_api_id,
                    match_count=len(group),
                    total_penalties=total,
                    avg_penalties=total / len(group),
                )
            )
        leagues.sort(key=lambda l: (-l.avg_penalties, l.league_api_id))

        with_stats = [m for m in matches if m.stats is not None]
        total_penalties = sum(m.stats.penalties for m in with_stats)
        logger.info(
            "penalty overview season=%s: %d/%d arbitri qualificati, %d partite con stats",
            season, len(referees), len(by_referee), len(with_stats),
        )
        return PenaltyOverview(
            season=season,
            referees=referees,
            leagues=leagues,
            total_matches=len(with_stats),
            total_penalties=total_penalties,
            avg_penalties=total_penalties / len(with_stats) if with_stats else 0.0,
            matches_with_penalty=sum(1 for m in with_stats if m.stats.penalties > 0),
        )

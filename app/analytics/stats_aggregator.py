"""
Ricalcolo statistiche stagionali arbitro.

Flusso per stagione:
  1. Arbitri con almeno una partita conclusa nella stagione (o righe già salvate)
  2. Per ogni arbitro: partite concluse con stats e lega joinate
  3. Raggruppamento per league_api_id
  4. Medie, strictness_index, home_bias_score per gruppo
  5. Upsert integrale di una riga per (arbitro, stagione, lega)
  6. Cancellazione delle righe dell'arbitro per leghe non più presenti

Ogni arbitro è indipendente (read-then-upsert su chiave univoca): un errore
viene registrato nel report e si passa al successivo. Rieseguire il ricalcolo
su input invariati produce righe identiche.
"""

import enum
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from app.analytics.records import MatchRecord, RefereeSeasonRow, SeasonLeagueKey
from app.repositories.base import StatsRepository

logger = logging.getLogger(__name__)

# Peso del rosso nello strictness_index: costante di design, non derivata.
RED_CARD_WEIGHT = 3


class StatsDenominator(str, enum.Enum):
    """
    OFFICIATED: tutte le partite dirette (comportamento storico, default).
    WITH_STATS: solo le partite con statistiche presenti.
    """
    OFFICIATED = "officiated"
    WITH_STATS = "with_stats"


@dataclass(frozen=True)
class RefereeFailure:
    referee_id: int
    error: str


@dataclass(frozen=True)
class RefereeResult:
    referee_id: int
    rows: tuple[RefereeSeasonRow, ...] = ()
    removed: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AggregationReport:
    season: int
    referees_updated: int = 0
    rows_written: int = 0
    rows_removed: int = 0
    failures: list[RefereeFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def error(self) -> str | None:
        if not self.failures:
            return None
        return f"{len(self.failures)} referee(s) failed during aggregation"


def compute_group_row(
    key: SeasonLeagueKey,
    matches: list[MatchRecord],
    denominator: StatsDenominator = StatsDenominator.OFFICIATED,
) -> RefereeSeasonRow:
    """
    Riga derivata per un gruppo (arbitro, stagione, lega).
    I totali sommano solo le partite con stats; il denominatore dipende dalla policy.
    """
    with_stats = [m for m in sorted(matches, key=lambda m: m.id) if m.stats is not None]
    match_count = len(matches)
    total_yellow = sum(m.stats.yellow_cards for m in with_stats)
    total_red = sum(m.stats.red_cards for m in with_stats)
    home_yellow = sum(m.stats.home_yellow_cards for m in with_stats)
    away_yellow = sum(m.stats.away_yellow_cards for m in with_stats)

    divisor = match_count if denominator == StatsDenominator.OFFICIATED else len(with_stats)
    if divisor > 0:
        avg_yellow = total_yellow / divisor
        avg_red = total_red / divisor
        home_bias = (away_yellow - home_yellow) / divisor
    else:
        avg_yellow = avg_red = home_bias = 0.0

    return RefereeSeasonRow(
        referee_id=key.referee_id,
        season=key.season,
        league_api_id=key.league_api_id,
        matches_officiated=match_count,
        matches_with_stats=len(with_stats),
        total_yellow_cards=total_yellow,
        total_red_cards=total_red,
        avg_yellow_cards=avg_yellow,
        avg_red_cards=avg_red,
        strictness_index=avg_yellow + RED_CARD_WEIGHT * avg_red,
        home_bias_score=home_bias,
    )


def group_by_league(referee_id: int, season: int, matches: list[MatchRecord]) -> dict[SeasonLeagueKey, list[MatchRecord]]:
    groups: dict[SeasonLeagueKey, list[MatchRecord]] = {}
    for m in matches:
        key = SeasonLeagueKey(referee_id, season, m.league_api_id)
        groups.setdefault(key, []).append(m)
    return groups


class StatsAggregator:
    """Ricalcola RefereeSeasonStats dalle partite concluse."""

    def __init__(
        self,
        repository: StatsRepository,
        max_workers: int = 1,
        denominator: StatsDenominator = StatsDenominator.OFFICIATED,
    ):
        self._repo = repository
        self._max_workers = max(1, max_workers)
        self._denominator = denominator

    def recompute_referee(self, referee_id: int, season: int) -> RefereeResult:
        """Read-then-upsert per un singolo arbitro. Non solleva: l'errore finisce nel risultato."""
        try:
            matches = self._repo.finished_matches(referee_id=referee_id, season=season)
            rows = []
            for key, group in sorted(group_by_league(referee_id, season, matches).items()):
                row = compute_group_row(key, group, self._denominator)
                if not row.data_complete:
                    logger.warning(
                        "Arbitro %s stagione %s lega %s: stats presenti per %s/%s partite, "
                        "medie sottostimate (dato incompleto, non arbitro permissivo)",
                        referee_id, season, key.league_api_id,
                        row.matches_with_stats, row.matches_officiated,
                    )
                self._repo.upsert_referee_season_stats(row)
                rows.append(row)
            # Leghe non più presenti (partite spostate o arbitro riassegnato)
            removed = self._repo.delete_stale_referee_season_stats(
                referee_id, season, [r.league_api_id for r in rows],
            )
            if removed:
                logger.info("Arbitro %s stagione %s: %s righe obsolete rimosse", referee_id, season, removed)
            return RefereeResult(referee_id=referee_id, rows=tuple(rows), removed=removed)
        except Exception as e:
            logger.exception("Ricalcolo arbitro %s stagione %s fallito, skip", referee_id, season)
            return RefereeResult(referee_id=referee_id, error=f"{type(e).__name__}: {e}")

    def recompute(self, season: int) -> AggregationReport:
        """
        Ricalcola tutti gli arbitri della stagione.
        Tenta sempre tutti gli arbitri; il report espone successi e fallimenti.
        Un errore nell'elenco arbitri (store irraggiungibile) si propaga.
        """
        referee_ids = self._repo.referee_ids_for_season(season)
        logger.info(
            "=== INIZIO ricalcolo stagione %s: %s arbitri, workers=%s ===",
            season, len(referee_ids), self._max_workers,
        )

        if self._max_workers == 1:
            results = [self.recompute_referee(rid, season) for rid in referee_ids]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                results = list(pool.map(lambda rid: self.recompute_referee(rid, season), referee_ids))

        report = AggregationReport(season=season)
        for result in results:
            if result.ok:
                report.referees_updated += 1
                report.rows_written += len(result.rows)
                report.rows_removed += result.removed
            else:
                report.failures.append(RefereeFailure(result.referee_id, result.error))

        logger.info(
            "=== FINE ricalcolo stagione %s: aggiornati=%s, righe=%s, errori=%s ===",
            season, report.referees_updated, report.rows_written, len(report.failures),
        )
        return report

"""
Previsione cartellini per una partita: carica storico arbitro, squadre e
prior di lega dal repository e applica il CardProbabilityModel.
Solo lettura.
"""

import logging
from dataclasses import dataclass

from app.analytics.card_probability import (
    FORM_WINDOW,
    BettingRecommendation,
    CardPrediction,
    CardProbabilityModel,
    FormAnalysis,
    LeaguePrior,
    RefereeCardStats,
    TeamCardStats,
    analyze_referee_form,
    recommend_bet,
)
from app.analytics.records import MatchRecord, RefereeSeasonRow
from app.core.errors import NotFoundError, ValidationError
from app.repositories.base import StatsRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValueSignal:
    market: str
    threshold: float
    probability: float
    odds: float
    ev: float

    @property
    def is_value(self) -> bool:
        return self.ev > 0


@dataclass(frozen=True)
class FixturePrediction:
    referee_id: int
    home_team_id: int
    away_team_id: int
    season: int
    league_api_id: int | None
    expected_cards: float
    threshold: float
    p_over: float
    p_under: float
    prediction: CardPrediction
    signals: list[ValueSignal]
    recommendation: BettingRecommendation
    stats_coverage: float


@dataclass(frozen=True)
class RefereeForm:
    referee_id: int
    season: int | None
    recent_match_ids: list[int]
    form: FormAnalysis


def referee_stats_from_rows(rows: list[RefereeSeasonRow]) -> RefereeCardStats:
    """
    Combina le righe stagionali (più leghe) ricalcolando le medie sulle sole
    partite con stats: le medie salvate dividono per le partite dirette e con
    copertura parziale sottostimano lambda. Senza stats il supporto è 0 e si
    ricade sul prior.
    """
    with_stats = sum(r.matches_with_stats for r in rows)
    if with_stats == 0:
        return RefereeCardStats(avg_yellow=0.0, avg_red=0.0, matches=0)
    avg_yellow = sum(r.total_yellow_cards for r in rows) / with_stats
    avg_red = sum(r.total_red_cards for r in rows) / with_stats
    return RefereeCardStats(avg_yellow=avg_yellow, avg_red=avg_red, matches=with_stats)


def stats_coverage(rows: list[RefereeSeasonRow]) -> float:
    """Quota di partite dirette con stats su tutte le righe (0 se nessuna partita)."""
    officiated = sum(r.matches_officiated for r in rows)
    if officiated == 0:
        return 0.0
    return sum(r.matches_with_stats for r in rows) / officiated


def team_stats_in_role(team_id: int, matches: list[MatchRecord], home: bool) -> TeamCardStats:
    """Media cartellini ricevuti dalla squadra giocando in casa (home=True) o fuori."""
    received = []
    for m in matches:
        if m.stats is None:
            continue
        if home and m.home_team_id == team_id:
            received.append(m.stats.home_cards)
        elif not home and m.away_team_id == team_id:
            received.append(m.stats.away_cards)
    if not received:
        return TeamCardStats(avg_cards_received=0.0, matches=0)
    return TeamCardStats(avg_cards_received=sum(received) / len(received), matches=len(received))


def league_prior(matches: list[MatchRecord]) -> LeaguePrior | None:
    stats = [m.stats for m in matches if m.stats is not None]
    if not stats:
        return None
    n = len(stats)
    return LeaguePrior(
        avg_total_cards=sum(s.total_cards for s in stats) / n,
        avg_home_cards=sum(s.home_cards for s in stats) / n,
        avg_away_cards=sum(s.away_cards for s in stats) / n,
        matches=n,
    )


class PredictionService:
    def __init__(self, repository: StatsRepository, model: CardProbabilityModel | None = None):
        self._repo = repository
        self._model = model or CardProbabilityModel()

    def predict_fixture(
        self,
        referee_id: int,
        home_team_id: int,
        away_team_id: int,
        season: int,
        league_api_id: int | None = None,
        threshold: float = 3.5,
        over_odds: float | None = None,
        under_odds: float | None = None,
    ) -> FixturePrediction:
        """Solleva InsufficientDataError se non c'è né storico né prior."""
        if home_team_id == away_team_id:
            raise ValidationError("home and away team must differ")
        if not self._repo.referee_exists(referee_id):
            raise NotFoundError(f"Referee {referee_id} not found")
        for team_id in (home_team_id, away_team_id):
            if not self._repo.team_exists(team_id):
                raise NotFoundError(f"Team {team_id} not found")
        if league_api_id is not None and not self._repo.league_exists(league_api_id):
            raise NotFoundError(f"League {league_api_id} not found")

        rows = self._repo.referee_season_rows(referee_id, season=season, league_api_id=league_api_id)
        ref_stats = referee_stats_from_rows(rows)
        home_stats = team_stats_in_role(
            home_team_id,
            self._repo.finished_matches(team_id=home_team_id, season=season, league_api_id=league_api_id),
            home=True,
        )
        away_stats = team_stats_in_role(
            away_team_id,
            self._repo.finished_matches(team_id=away_team_id, season=season, league_api_id=league_api_id),
            home=False,
        )
        prior = league_prior(self._repo.finished_matches(season=season, league_api_id=league_api_id))

        prediction = self._model.predict(ref_stats, home_stats, away_stats, prior)
        lam = prediction.expected_total_cards
        p_over, p_under = self._model.over_under_probability(lam, threshold)

        signals = []
        if over_odds is not None:
            signals.append(ValueSignal("over", threshold, p_over, over_odds, self._model.expected_value(p_over, over_odds)))
        if under_odds is not None:
            signals.append(ValueSignal("under", threshold, p_under, under_odds, self._model.expected_value(p_under, under_odds)))

        logger.info(
            "predict_fixture ref=%s %s-%s season=%s: lambda=%.3f p_over(%s)=%.3f",
            referee_id, home_team_id, away_team_id, season, lam, threshold, p_over,
        )
        return FixturePrediction(
            referee_id=referee_id,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            season=season,
            league_api_id=league_api_id,
            expected_cards=lam,
            threshold=threshold,
            p_over=p_over,
            p_under=p_under,
            prediction=prediction,
            signals=signals,
            recommendation=recommend_bet(prediction),
            stats_coverage=stats_coverage(rows),
        )

    def referee_form(self, referee_id: int, season: int | None = None, window: int = FORM_WINDOW) -> RefereeForm:
        """
        Gialli nelle ultime `window` partite con stats (per data) contro la media
        di tutte le partite con stats del periodo. Le partite senza stats non
        entrano: contarle come zero cartellini inventerebbe un trend.
        """
        if window < 1:
            raise ValidationError("window must be >= 1")
        if not self._repo.referee_exists(referee_id):
            raise NotFoundError(f"Referee {referee_id} not found")

        matches = [m for m in self._repo.finished_matches(referee_id=referee_id, season=season) if m.stats]
        # Senza data prima, poi cronologico: recent = coda della lista
        matches.sort(key=lambda m: (m.date is not None, m.date.timestamp() if m.date else 0.0, m.id))
        season_avg = sum(m.stats.yellow_cards for m in matches) / len(matches) if matches else 0.0
        recent = matches[-window:]
        form = analyze_referee_form([m.stats.yellow_cards for m in recent], season_avg)
        logger.info(
            "referee_form ref=%s season=%s: %s partite, trend=%s",
            referee_id, season, form.matches, form.trend,
        )
        return RefereeForm(
            referee_id=referee_id,
            season=season,
            recent_match_ids=[m.id for m in recent],
            form=form,
        )

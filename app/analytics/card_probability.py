"""
Modello probabilistico cartellini.

  lambda = w_ref * (media gialli + media rossi arbitro)
         + w_team * (media cartellini ricevuti casa + media ricevuti trasferta)

Con la policy di default (0.5, 0.5) il segnale arbitro e quello delle due
squadre sono due stime della stessa grandezza e vengono mediati.
Totale cartellini ~ Poisson(lambda); per la soglia X.5:
  p_under = PoissonCDF(floor(X.5), lambda), p_over = 1 - p_under
EV = probabilità * quota decimale - 1 (positivo = value bet).
"""

import logging
import math
from dataclasses import dataclass

from scipy.stats import poisson

from app.analytics.rounding import round_half_up
from app.core.errors import InsufficientDataError, ValidationError

logger = logging.getLogger(__name__)

STANDARD_LINES = (2.5, 3.5, 4.5)


@dataclass(frozen=True)
class RefereeCardStats:
    avg_yellow: float
    avg_red: float
    matches: int

    @property
    def avg_total(self) -> float:
        return self.avg_yellow + self.avg_red


@dataclass(frozen=True)
class TeamCardStats:
    """Media cartellini ricevuti da una squadra nel suo ruolo (casa o trasferta)."""
    avg_cards_received: float
    matches: int


@dataclass(frozen=True)
class LeaguePrior:
    """Medie di lega per partita: totale, lato casa, lato trasferta."""
    avg_total_cards: float
    avg_home_cards: float
    avg_away_cards: float
    matches: int


@dataclass(frozen=True)
class BlendPolicy:
    referee_weight: float = 0.5
    team_weight: float = 0.5

    def __post_init__(self):
        if self.referee_weight < 0 or self.team_weight < 0:
            raise ValidationError("Blend weights must be non-negative")


DEFAULT_BLEND = BlendPolicy()


@dataclass(frozen=True)
class OverUnder:
    threshold: float
    p_over: float
    p_under: float


@dataclass(frozen=True)
class CardPrediction:
    expected_total_cards: float
    lines: list[OverUnder]
    confidence_score: int
    confidence: str
    used_prior: bool


def _require_finite(name: str, value: float) -> None:
    if value is None or isinstance(value, bool) or not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number")


def confidence_from_samples(referee_matches: int, team_a_matches: int, team_b_matches: int) -> tuple[int, str]:
    """Punteggio di confidenza 0-100 dalla dimensione dei campioni storici."""
    score = 0
    if referee_matches >= 20:
        score += 40
    elif referee_matches >= 10:
        score += 25
    elif referee_matches >= 5:
        score += 15

    if team_a_matches >= 10 and team_b_matches >= 10:
        score += 35
    elif team_a_matches >= 5 and team_b_matches >= 5:
        score += 20

    score = min(100, score)
    if score >= 70:
        label = "high"
    elif score >= 40:
        label = "medium"
    else:
        label = "low"
    return score, label


class CardProbabilityModel:
    def __init__(self, policy: BlendPolicy = DEFAULT_BLEND):
        self.policy = policy

    def expect(
        self,
        referee: RefereeCardStats | None,
        team_a: TeamCardStats | None,
        team_b: TeamCardStats | None,
        prior: LeaguePrior | None = None,
    ) -> float:
        """
        Cartellini attesi nella partita. team_a gioca in casa, team_b in trasferta.
        Input senza storico (0 partite) sostituiti dal prior di lega;
        senza prior solleva InsufficientDataError, mai uno zero fuorviante.
        """
        lam, _ = self._expect(referee, team_a, team_b, prior)
        return lam

    def _expect(self, referee, team_a, team_b, prior) -> tuple[float, bool]:
        usable_prior = prior if prior is not None and prior.matches > 0 else None
        used_prior = False

        def pick(has_history: bool, value, prior_value, what: str) -> float:
            nonlocal used_prior
            if has_history:
                return value
            if usable_prior is None:
                raise InsufficientDataError(f"No history for {what} and no league prior")
            used_prior = True
            return prior_value(usable_prior)

        ref_total = pick(
            referee is not None and referee.matches > 0,
            referee.avg_total if referee else None,
            lambda p: p.avg_total_cards,
            "referee",
        )
        a = pick(
            team_a is not None and team_a.matches > 0,
            team_a.avg_cards_received if team_a else None,
            lambda p: p.avg_home_cards,
            "home team",
        )
        b = pick(
            team_b is not None and team_b.matches > 0,
            team_b.avg_cards_received if team_b else None,
            lambda p: p.avg_away_cards,
            "away team",
        )
        lam = self.policy.referee_weight * ref_total + self.policy.team_weight * (a + b)
        return lam, used_prior

    @staticmethod
    def over_under_probability(lam: float, threshold: float) -> tuple[float, float]:
        """(p_over, p_under) per la soglia; p_over + p_under = 1."""
        _require_finite("lambda", lam)
        _require_finite("threshold", threshold)
        if lam < 0:
            raise ValidationError("lambda must be >= 0")
        if threshold < 0:
            raise ValidationError("threshold must be >= 0")

        k = math.floor(threshold)
        p_under = 1.0 if lam == 0 else float(poisson.cdf(k, lam))
        return 1.0 - p_under, p_under

    @staticmethod
    def expected_value(probability: float, decimal_odds: float) -> float:
        """EV di una puntata unitaria. Input non validi vengono rifiutati, non corretti."""
        _require_finite("probability", probability)
        _require_finite("decimal odds", decimal_odds)
        if not 0.0 <= probability <= 1.0:
            raise ValidationError("probability must be within [0, 1]")
        if decimal_odds <= 0:
            raise ValidationError("decimal odds must be > 0")
        return probability * decimal_odds - 1

    def predict(
        self,
        referee: RefereeCardStats | None,
        team_a: TeamCardStats | None,
        team_b: TeamCardStats | None,
        prior: LeaguePrior | None = None,
        thresholds: tuple[float, ...] = STANDARD_LINES,
    ) -> CardPrediction:
        lam, used_prior = self._expect(referee, team_a, team_b, prior)
        lines = []
        for t in thresholds:
            p_over, p_under = self.over_under_probability(lam, t)
            lines.append(OverUnder(threshold=t, p_over=p_over, p_under=p_under))
        score, label = confidence_from_samples(
            referee.matches if referee else 0,
            team_a.matches if team_a else 0,
            team_b.matches if team_b else 0,
        )
        if used_prior:
            logger.info("predict: lambda=%.3f calcolata con prior di lega", lam)
        return CardPrediction(
            expected_total_cards=lam,
            lines=lines,
            confidence_score=score,
            confidence=label,
            used_prior=used_prior,
        )


# --- Forma arbitro ---

FORM_WINDOW = 5
TREND_THRESHOLD = 0.15


@dataclass(frozen=True)
class FormAnalysis:
    """
    trend: "declining" = più cartellini nelle ultime partite (peggio per chi gioca l'under),
    "improving" = meno cartellini. form_rating 1-10: più alto = arbitro più costante.
    """
    trend: str
    trend_score: float
    avg_recent: float
    avg_season: float
    volatility: float
    form_rating: int
    matches: int


def analyze_referee_form(recent_cards: list[int], season_avg: float) -> FormAnalysis:
    """
    recent_cards in ordine cronologico (la più vecchia prima).
    Pendenza della regressione lineare normalizzata in [-1, 1], solo con almeno 3 partite.
    """
    n = len(recent_cards)
    if n == 0:
        return FormAnalysis(
            trend="stable",
            trend_score=0.0,
            avg_recent=season_avg,
            avg_season=season_avg,
            volatility=0.0,
            form_rating=5,
            matches=0,
        )

    avg = sum(recent_cards) / n
    trend_score = 0.0
    if n >= 3:
        x_mean = (n - 1) / 2
        num = sum((i - x_mean) * (y - avg) for i, y in enumerate(recent_cards))
        den = sum((i - x_mean) ** 2 for i in range(n))
        slope = num / den if den else 0.0
        trend_score = max(-1.0, min(1.0, slope / 2))

    volatility = math.sqrt(sum((y - avg) ** 2 for y in recent_cards) / n)

    if trend_score > TREND_THRESHOLD:
        trend = "declining"
    elif trend_score < -TREND_THRESHOLD:
        trend = "improving"
    else:
        trend = "stable"

    consistency = max(0.0, 10 - volatility * 2)
    form_rating = int(round_half_up(max(1.0, min(10.0, consistency)), 0))

    return FormAnalysis(
        trend=trend,
        trend_score=round_half_up(trend_score, 2),
        avg_recent=round_half_up(avg, 2),
        avg_season=season_avg,
        volatility=round_half_up(volatility, 2),
        form_rating=form_rating,
        matches=n,
    )


# --- Raccomandazione ---

NO_EDGE_PICK = "Skip - No Clear Edge"

_CONFIDENCE_LABELS = {
    "high": "High Confidence",
    "medium": "Medium Confidence",
    "low": "Low Confidence",
}


@dataclass(frozen=True)
class BettingRecommendation:
    primary_pick: str
    odds_range: str | None
    confidence: str
    reasoning: str
    alternative_picks: list[str]

    @property
    def has_edge(self) -> bool:
        return self.primary_pick != NO_EDGE_PICK


def recommend_bet(prediction: CardPrediction) -> BettingRecommendation:
    """
    Scelta della linea dalle probabilità del modello, dalla più ambiziosa
    alla più prudente: over 4.5 (>=60%), over 3.5 (>=65%), over 2.5 (>=70%),
    under 3.5 (>=60%); altrimenti nessuna giocata.
    """
    lam = prediction.expected_total_cards
    over25, _ = CardProbabilityModel.over_under_probability(lam, 2.5)
    over35, under35 = CardProbabilityModel.over_under_probability(lam, 3.5)
    over45, _ = CardProbabilityModel.over_under_probability(lam, 4.5)

    alternatives: list[str] = []
    if over45 >= 0.60:
        pick, odds_range = "Over 4.5 Cards", "2.00 - 2.50"
        reasoning = f"Strong {over45 * 100:.0f}% probability for 5+ cards. Expected {lam:.1f} cards."
        alternatives.append("Over 3.5 Cards (safer)")
    elif over35 >= 0.65:
        pick, odds_range = "Over 3.5 Cards", "1.70 - 2.00"
        reasoning = f"Good {over35 * 100:.0f}% probability for 4+ cards based on historical data."
        if over45 >= 0.40:
            alternatives.append("Over 4.5 Cards (value)")
        alternatives.append("Over 2.5 Cards (safer)")
    elif over25 >= 0.70:
        pick, odds_range = "Over 2.5 Cards", "1.40 - 1.60"
        reasoning = f"High {over25 * 100:.0f}% probability for 3+ cards. Conservative but reliable."
    elif under35 >= 0.60:
        pick, odds_range = "Under 3.5 Cards", "1.80 - 2.20"
        reasoning = f"{under35 * 100:.0f}% probability for under 4 cards. Lenient referee expected."
        alternatives.append("Under 4.5 Cards (safer)")
    else:
        pick, odds_range = NO_EDGE_PICK, None
        reasoning = "Probabilities are too close to call."

    return BettingRecommendation(
        primary_pick=pick,
        odds_range=odds_range,
        confidence=_CONFIDENCE_LABELS.get(prediction.confidence, "Low Confidence"),
        reasoning=reasoning,
        alternative_picks=alternatives,
    )

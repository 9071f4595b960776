"""
Combinazioni arbitro-squadra ("sure cards").

Ogni partita conclusa con arbitro e stats genera due combo:
(arbitro, squadra casa) e (arbitro, squadra ospite). Per combo si accumulano
partite, cartellini del lato squadra e partite sopra 2.5 / 3.5 / 4.5
cartellini totali. Sotto MIN_COMBO_MATCHES la combo è scartata.

La compatibilità arbitro-squadra confronta invece i cartellini presi dalla
squadra con quell'arbitro con quelli attesi dalle medie stagionali.
"""

from dataclasses import dataclass

from app.analytics.records import ComboKey, MatchRecord
from app.analytics.rounding import round_half_up
from app.core.errors import NotFoundError, ValidationError
from app.repositories.base import StatsRepository

MIN_COMBO_MATCHES = 3
COMBO_THRESHOLDS = (2.5, 3.5, 4.5)


@dataclass
class _ComboAccumulator:
    matches: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    over25: int = 0
    over35: int = 0
    over45: int = 0

    def add(self, yellow: int, red: int, total_cards: int) -> None:
        self.matches += 1
        self.yellow_cards += yellow
        self.red_cards += red
        if total_cards > 2.5:
            self.over25 += 1
        if total_cards > 3.5:
            self.over35 += 1
        if total_cards > 4.5:
            self.over45 += 1


@dataclass(frozen=True)
class Combo:
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
    threshold: float
    over_rate: float


def _rate(count: int, matches: int) -> float:
    return count / matches * 100


class ComboFinder:
    def __init__(self, repository: StatsRepository):
        self._repo = repository

    def rank_combos(
        self,
        threshold: float,
        season: int | None = None,
        limit: int | None = None,
    ) -> list[Combo]:
        """Combo ordinate per over_rate decrescente alla soglia richiesta."""
        if threshold not in COMBO_THRESHOLDS:
            raise ValidationError(f"threshold must be one of {COMBO_THRESHOLDS}")
        if limit is not None and limit < 1:
            raise ValidationError("limit must be >= 1")

        combos: dict[ComboKey, _ComboAccumulator] = {}
        for m in self._repo.finished_matches(season=season, require_referee=True):
            if m.referee_id is None or m.stats is None:
                continue
            total = m.stats.total_cards
            home_key = ComboKey(m.referee_id, m.home_team_id)
            away_key = ComboKey(m.referee_id, m.away_team_id)
            combos.setdefault(home_key, _ComboAccumulator()).add(
                m.stats.home_yellow_cards, m.stats.home_red_cards, total,
            )
            combos.setdefault(away_key, _ComboAccumulator()).add(
                m.stats.away_yellow_cards, m.stats.away_red_cards, total,
            )

        ranked = []
        for key, acc in combos.items():
            if acc.matches < MIN_COMBO_MATCHES:
                continue
            rates = {
                2.5: _rate(acc.over25, acc.matches),
                3.5: _rate(acc.over35, acc.matches),
                4.5: _rate(acc.over45, acc.matches),
            }
            ranked.append(
                Combo(
                    referee_id=key.referee_id,
                    team_id=key.team_id,
                    matches=acc.matches,
                    yellow_cards=acc.yellow_cards,
                    red_cards=acc.red_cards,
                    avg_yellow_cards=acc.yellow_cards / acc.matches,
                    avg_red_cards=acc.red_cards / acc.matches,
                    over25_rate=rates[2.5],
                    over35_rate=rates[3.5],
                    over45_rate=rates[4.5],
                    threshold=threshold,
                    over_rate=rates[threshold],
                )
            )

        ranked.sort(key=lambda c: (-c.over_rate, -c.matches, c.referee_id, c.team_id))
        return ranked[:limit] if limit else ranked

    def compatibility(self, referee_id: int, team_id: int, season: int | None = None) -> "Compatibility":
        """
        Storico squadra con l'arbitro (solo partite con stats) contro le medie
        della stagione: media gialli dell'arbitro per partita e media gialli
        della squadra per partita.
        """
        if not self._repo.referee_exists(referee_id):
            raise NotFoundError(f"Referee {referee_id} not found")
        if not self._repo.team_exists(team_id):
            raise NotFoundError(f"Team {team_id} not found")

        referee_matches = [m for m in self._repo.finished_matches(referee_id=referee_id, season=season) if m.stats]
        team_matches = [m for m in self._repo.finished_matches(team_id=team_id, season=season) if m.stats]
        history = [team_history_entry(m, team_id) for m in team_matches if m.referee_id == referee_id]

        referee_avg_yellow = (
            sum(m.stats.yellow_cards for m in referee_matches) / len(referee_matches) if referee_matches else 0.0
        )
        team_avg_yellow = (
            sum(team_history_entry(m, team_id).yellow_cards for m in team_matches) / len(team_matches)
            if team_matches else 0.0
        )
        result = compatibility_score(history, referee_avg_yellow, team_avg_yellow)
        return Compatibility(
            referee_id=referee_id,
            team_id=team_id,
            season=season,
            referee_avg_yellow=referee_avg_yellow,
            team_avg_yellow=team_avg_yellow,
            score=result,
        )


# --- Compatibilità arbitro-squadra ---

TENDENCY_THRESHOLD = 15
BASELINE_WIN_RATE = 33.33


@dataclass(frozen=True)
class TeamMatchEntry:
    """Una partita vista dal lato della squadra."""
    yellow_cards: int
    red_cards: int
    fouls: int
    result: str | None


@dataclass(frozen=True)
class CompatibilityScore:
    score: int
    rating: str
    card_tendency: str
    matches: int
    avg_cards_in_history: float
    deviation_percent: float = 0.0
    win_rate: float = 0.0


@dataclass(frozen=True)
class Compatibility:
    referee_id: int
    team_id: int
    season: int | None
    referee_avg_yellow: float
    team_avg_yellow: float
    score: CompatibilityScore


def team_history_entry(match: MatchRecord, team_id: int) -> TeamMatchEntry:
    s = match.stats
    if team_id == match.home_team_id:
        yellow, red, fouls = s.home_yellow_cards, s.home_red_cards, s.home_fouls
    else:
        yellow, red, fouls = s.away_yellow_cards, s.away_red_cards, s.away_fouls
    return TeamMatchEntry(yellow_cards=yellow, red_cards=red, fouls=fouls, result=match.result_for(team_id))


def _rating_for(score: float) -> str:
    if score >= 70:
        return "excellent"
    if score >= 55:
        return "good"
    if score >= 45:
        return "neutral"
    if score >= 30:
        return "poor"
    return "very_poor"


def compatibility_score(
    history: list[TeamMatchEntry],
    referee_avg_yellow: float,
    team_avg_yellow: float,
) -> CompatibilityScore:
    """
    Punteggio 0-100, 50 = neutro.
    Meno cartellini dell'atteso alzano il punteggio (0.3 punti per punto
    percentuale di scarto), le vittorie sopra il 33.33% lo alzano di 0.4 per
    punto; +5 con almeno 5 partite e altri +5 con almeno 10.
    Partite senza risultato contano come non vinte.
    """
    n = len(history)
    if n == 0:
        return CompatibilityScore(score=50, rating="neutral", card_tendency="normal", matches=0, avg_cards_in_history=0.0)

    avg_cards = sum(h.yellow_cards + h.red_cards for h in history) / n
    expected = (referee_avg_yellow + team_avg_yellow) / 2
    deviation = (avg_cards - expected) / expected * 100 if expected > 0 else 0.0
    win_rate = sum(1 for h in history if h.result == "win") / n * 100

    score = 50 - deviation * 0.3 + (win_rate - BASELINE_WIN_RATE) * 0.4
    if n >= 5:
        score += 5
    if n >= 10:
        score += 5
    score = max(0.0, min(100.0, score))

    if deviation <= -TENDENCY_THRESHOLD:
        tendency = "fewer"
    elif deviation >= TENDENCY_THRESHOLD:
        tendency = "more"
    else:
        tendency = "normal"

    return CompatibilityScore(
        score=int(round_half_up(score, 0)),
        rating=_rating_for(score),
        card_tendency=tendency,
        matches=n,
        avg_cards_in_history=round_half_up(avg_cards, 2),
        deviation_percent=round_half_up(deviation, 2),
        win_rate=round_half_up(win_rate, 2),
    )

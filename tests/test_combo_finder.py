"""Tests for referee-team combos."""

import pytest

from app.analytics.combo_finder import (
    MIN_COMBO_MATCHES,
    ComboFinder,
    TeamMatchEntry,
    compatibility_score,
)
from app.core.errors import NotFoundError, ValidationError
from tests.fakes import make_stats


class TestComboFinder:
    def test_never_returns_small_combos(self, stats_repo):
        stats_repo.add_match(1, referee_id=1, home_team_id=10, away_team_id=20, stats=make_stats(home_yellow=3, away_yellow=3))
        stats_repo.add_match(2, referee_id=1, home_team_id=10, away_team_id=30, stats=make_stats(home_yellow=3, away_yellow=3))

        combos = ComboFinder(stats_repo).rank_combos(3.5)
        assert combos == []

    def test_counts_both_sides_and_rates(self, stats_repo):
        # Squadra 10 in casa tre volte con lo stesso arbitro: 6, 3, 5 cartellini totali
        stats_repo.add_match(1, referee_id=1, home_team_id=10, away_team_id=20, stats=make_stats(home_yellow=2, away_yellow=4))
        stats_repo.add_match(2, referee_id=1, home_team_id=10, away_team_id=30, stats=make_stats(home_yellow=1, away_yellow=2))
        stats_repo.add_match(3, referee_id=1, home_team_id=10, away_team_id=40, stats=make_stats(home_yellow=3, home_red=1, away_yellow=1))

        combos = ComboFinder(stats_repo).rank_combos(4.5)

        assert len(combos) == 1
        combo = combos[0]
        assert (combo.referee_id, combo.team_id) == (1, 10)
        assert combo.matches == 3
        assert combo.yellow_cards == 6
        assert combo.red_cards == 1
        assert combo.over25_rate == pytest.approx(100.0)
        assert combo.over35_rate == pytest.approx(200 / 3)
        assert combo.over45_rate == pytest.approx(200 / 3)
        assert combo.over_rate == combo.over45_rate

    def test_sorted_by_over_rate_then_matches(self, stats_repo):
        mid = 0
        for team, totals in ((10, [5, 5, 1]), (20, [5, 5, 5]), (30, [5, 5, 1, 1, 5, 5])):
            for total in totals:
                mid += 1
                stats_repo.add_match(mid, referee_id=7, home_team_id=team, away_team_id=100 + mid, stats=make_stats(home_yellow=total))

        combos = ComboFinder(stats_repo).rank_combos(3.5)

        assert all(c.matches >= MIN_COMBO_MATCHES for c in combos)
        assert [c.team_id for c in combos] == [20, 30, 10]

    def test_matches_without_referee_or_stats_skipped(self, stats_repo):
        for i in range(1, 4):
            stats_repo.add_match(i, referee_id=None, stats=make_stats(home_yellow=5))
            stats_repo.add_match(10 + i, referee_id=2, stats=None)
        assert ComboFinder(stats_repo).rank_combos(2.5) == []

    def test_limit(self, stats_repo):
        for i in range(1, 4):
            stats_repo.add_match(i, referee_id=1, home_team_id=10, away_team_id=20, stats=make_stats(home_yellow=4))
        assert len(ComboFinder(stats_repo).rank_combos(2.5)) == 2
        assert len(ComboFinder(stats_repo).rank_combos(2.5, limit=1)) == 1

    @pytest.mark.parametrize("threshold", [3.0, 5.5, 0])
    def test_unsupported_threshold(self, stats_repo, threshold):
        with pytest.raises(ValidationError):
            ComboFinder(stats_repo).rank_combos(threshold)

    def test_invalid_limit(self, stats_repo):
        with pytest.raises(ValidationError):
            ComboFinder(stats_repo).rank_combos(3.5, limit=0)


def _entries(n, yellow, result):
    return [TeamMatchEntry(yellow_cards=yellow, red_cards=0, fouls=10, result=result) for _ in range(n)]


class TestCompatibilityScore:
    """0-100 score: fewer cards than expected and more wins push it up."""

    def test_no_history_is_neutral(self):
        score = compatibility_score([], 4.0, 2.0)
        assert (score.score, score.rating, score.card_tendency, score.matches) == (50, "neutral", "normal", 0)
        assert score.avg_cards_in_history == 0.0

    def test_few_cards_and_wins_clamped_to_100(self):
        score = compatibility_score(_entries(5, 1, "win"), 4.0, 2.0)
        assert score.score == 100
        assert score.rating == "excellent"
        assert score.card_tendency == "fewer"
        assert score.deviation_percent == pytest.approx(-66.67)
        assert score.win_rate == pytest.approx(100.0)

    def test_more_cards_and_draws(self):
        # atteso 2, media 3: +50%; nessuna vittoria
        score = compatibility_score(_entries(2, 3, "draw"), 2.0, 2.0)
        assert score.score == 22
        assert score.rating == "very_poor"
        assert score.card_tendency == "more"
        assert score.avg_cards_in_history == pytest.approx(3.0)

    def test_zero_expectation_gives_no_deviation(self):
        score = compatibility_score(_entries(3, 2, "loss"), 0.0, 0.0)
        assert score.deviation_percent == 0.0
        assert score.card_tendency == "normal"

    def test_reds_count_as_cards(self):
        history = [TeamMatchEntry(yellow_cards=1, red_cards=1, fouls=0, result=None)]
        assert compatibility_score(history, 2.0, 2.0).avg_cards_in_history == pytest.approx(2.0)

    @pytest.mark.parametrize("n, bonus", [(4, 0), (5, 5), (10, 10)])
    def test_sample_size_bonus(self, n, bonus):
        # cartellini in linea con l'atteso, vittorie al 33.33%: resta solo il bonus
        history = _entries(n, 2, None)
        score = compatibility_score(history, 2.0, 2.0)
        assert score.score == round(50 + 33.33 * -0.4) + bonus


class TestComboFinderCompatibility:
    def _seed(self, repo):
        repo.add_match(1, referee_id=1, home_team_id=10, away_team_id=20,
                       stats=make_stats(home_yellow=1, away_yellow=3), home_goals=2, away_goals=0)
        repo.add_match(2, referee_id=1, home_team_id=30, away_team_id=10,
                       stats=make_stats(home_yellow=2, away_yellow=2), home_goals=1, away_goals=1)
        repo.add_match(3, referee_id=2, home_team_id=10, away_team_id=40,
                       stats=make_stats(home_yellow=3, away_yellow=1), home_goals=0, away_goals=1)
        # Senza stats: fuori da storico e medie
        repo.add_match(4, referee_id=1, home_team_id=10, away_team_id=50, stats=None)

    def test_history_and_season_averages(self, stats_repo):
        self._seed(stats_repo)
        result = ComboFinder(stats_repo).compatibility(1, 10)

        assert result.referee_avg_yellow == pytest.approx(4.0)
        assert result.team_avg_yellow == pytest.approx(2.0)
        assert result.score.matches == 2
        assert result.score.avg_cards_in_history == pytest.approx(1.5)
        assert result.score.win_rate == pytest.approx(50.0)
        assert result.score.card_tendency == "fewer"
        assert result.score.score == 72
        assert result.score.rating == "excellent"

    def test_no_shared_matches(self, stats_repo):
        self._seed(stats_repo)
        result = ComboFinder(stats_repo).compatibility(2, 20)
        assert result.score.matches == 0
        assert result.score.score == 50

    def test_unknown_entities(self, stats_repo):
        self._seed(stats_repo)
        with pytest.raises(NotFoundError):
            ComboFinder(stats_repo).compatibility(99, 10)
        with pytest.raises(NotFoundError):
            ComboFinder(stats_repo).compatibility(1, 999)

"""Tests for home/away bias."""

import pytest

from app.analytics.bias_calculator import MIN_MATCHES_WITH_STATS, BiasCalculator, BiasResult
from app.analytics.records import InsufficientData
from tests.fakes import make_stats


def _seed(repo, referee_id, n, home_yellow=1, away_yellow=2, start=0, season=2025):
    for i in range(n):
        repo.add_match(
            start + i,
            referee_id=referee_id,
            season=season,
            stats=make_stats(home_yellow=home_yellow, away_yellow=away_yellow),
        )


class TestComputeBias:
    def test_below_threshold_is_insufficient(self, stats_repo):
        _seed(stats_repo, 1, MIN_MATCHES_WITH_STATS - 1)
        result = BiasCalculator(stats_repo).compute_bias(1)

        assert isinstance(result, InsufficientData)
        assert result.matches == 4
        assert result.required == 5

    def test_matches_without_stats_do_not_count(self, stats_repo):
        _seed(stats_repo, 1, 4)
        stats_repo.add_match(100, referee_id=1, stats=None)
        assert isinstance(BiasCalculator(stats_repo).compute_bias(1), InsufficientData)

    def test_bias_values(self, stats_repo):
        _seed(stats_repo, 1, 5, home_yellow=1, away_yellow=2)
        result = BiasCalculator(stats_repo).compute_bias(1)

        assert isinstance(result, BiasResult)
        assert result.match_count == 5
        assert result.avg_home_cards == pytest.approx(1.0)
        assert result.avg_away_cards == pytest.approx(2.0)
        assert result.bias_score == pytest.approx(1.0)
        assert result.bias_percent == pytest.approx(100 / 3)

    def test_zero_cards_gives_zero_percent(self, stats_repo):
        _seed(stats_repo, 1, 5, home_yellow=0, away_yellow=0)
        result = BiasCalculator(stats_repo).compute_bias(1)
        assert result.bias_score == 0
        assert result.bias_percent == 0.0

    def test_season_filter(self, stats_repo):
        _seed(stats_repo, 1, 5, season=2024)
        assert isinstance(BiasCalculator(stats_repo).compute_bias(1, season=2025), InsufficientData)
        assert isinstance(BiasCalculator(stats_repo).compute_bias(1, season=2024), BiasResult)


class TestRankBias:
    def test_sorted_by_absolute_bias(self, stats_repo):
        _seed(stats_repo, 1, 5, home_yellow=1, away_yellow=2, start=0)
        _seed(stats_repo, 2, 5, home_yellow=4, away_yellow=1, start=10)
        _seed(stats_repo, 3, 5, home_yellow=2, away_yellow=2, start=20)
        _seed(stats_repo, 4, 2, home_yellow=0, away_yellow=9, start=30)

        ranked = BiasCalculator(stats_repo).rank_bias()

        assert [r.referee_id for r in ranked] == [2, 1, 3]
        assert ranked[0].bias_score == pytest.approx(-3.0)

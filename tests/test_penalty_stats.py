"""Tests for per-referee and per-league penalty statistics."""

from datetime import datetime

import pytest

from app.analytics.penalty_stats import MIN_MATCHES_OFFICIATED, PenaltyAnalyzer
from app.analytics.records import InsufficientData
from tests.fakes import make_stats

# (casa, trasferta) per partita, in ordine di data
PENALTIES = [(1, 0), (0, 0), (1, 1), (0, 1), (0, 0)]


def _seed(repo, referee_id=1, league_api_id=135, penalties=PENALTIES, with_missing=True):
    base = referee_id * 100
    for i, (home, away) in enumerate(penalties, start=1):
        repo.add_match(
            base + i,
            referee_id=referee_id,
            league_api_id=league_api_id,
            date=datetime(2025, 1, i),
            stats=make_stats(home_penalties=home, away_penalties=away),
        )
    if with_missing:
        repo.add_match(base + 99, referee_id=referee_id, league_api_id=league_api_id, date=datetime(2025, 2, 1))


class TestRefereePenalties:
    def test_worked_example(self, stats_repo):
        _seed(stats_repo)
        result = PenaltyAnalyzer(stats_repo).referee_penalties(1)

        assert result.matches_officiated == 6
        assert result.match_count == 5
        assert result.total_penalties == 4
        assert (result.home_penalties, result.away_penalties) == (2, 2)
        assert result.avg_penalties == pytest.approx(0.8)
        assert result.penalty_rate == pytest.approx(60.0)
        assert result.multi_penalty_rate == pytest.approx(20.0)
        assert result.matches_with_penalty == 3
        assert result.matches_with_multiple == 1
        assert result.home_bias == pytest.approx(0.0)

    def test_recent_penalty_matches_newest_first(self, stats_repo):
        _seed(stats_repo)
        recent = PenaltyAnalyzer(stats_repo).referee_penalties(1).recent_penalty_matches
        assert [m.match_id for m in recent] == [104, 103, 101]
        assert [m.total for m in recent] == [1, 2, 1]

    def test_home_bias_sign(self, stats_repo):
        _seed(stats_repo, penalties=[(1, 0), (1, 0), (1, 1), (0, 0), (0, 0)])
        result = PenaltyAnalyzer(stats_repo).referee_penalties(1)
        assert result.home_bias == pytest.approx(3 / 4 * 100 - 50)

    def test_too_few_matches(self, stats_repo):
        _seed(stats_repo, penalties=PENALTIES[: MIN_MATCHES_OFFICIATED - 2])
        result = PenaltyAnalyzer(stats_repo).referee_penalties(1)
        assert isinstance(result, InsufficientData)
        assert result.required == MIN_MATCHES_OFFICIATED

    def test_missing_stats_count_toward_qualification_only(self, stats_repo):
        """Partite senza stats qualificano l'arbitro ma non entrano nelle medie."""
        _seed(stats_repo, penalties=[(0, 0)] * 4)
        result = PenaltyAnalyzer(stats_repo).referee_penalties(1)
        assert result.matches_officiated == 5
        assert result.match_count == 4
        assert result.avg_penalties == 0.0
        assert result.home_bias == 0.0
        assert result.recent_penalty_matches == []


class TestPenaltyOverview:
    def test_referees_and_leagues_sorted_by_average(self, stats_repo):
        _seed(stats_repo, referee_id=1, league_api_id=135)
        _seed(stats_repo, referee_id=2, league_api_id=39, penalties=[(1, 1)] * 5, with_missing=False)
        _seed(stats_repo, referee_id=3, league_api_id=39, penalties=[(0, 0)] * 2, with_missing=False)

        overview = PenaltyAnalyzer(stats_repo).overview()

        assert [r.referee_id for r in overview.referees] == [2, 1]
        assert [l.league_api_id for l in overview.leagues] == [39, 135]
        assert overview.leagues[0].match_count == 7
        assert overview.leagues[0].avg_penalties == pytest.approx(10 / 7)
        assert overview.total_matches == 12
        assert overview.total_penalties == 14
        assert overview.avg_penalties == pytest.approx(14 / 12)
        assert overview.matches_with_penalty == 8

    def test_season_filter(self, stats_repo):
        _seed(stats_repo)
        overview = PenaltyAnalyzer(stats_repo).overview(season=2019)
        assert overview.referees == []
        assert overview.total_matches == 0
        assert overview.avg_penalties == 0.0

"""Tests for the referee season stats recomputation."""

from dataclasses import replace

import pytest

from app.analytics.records import SeasonLeagueKey
from app.analytics.stats_aggregator import (
    RED_CARD_WEIGHT,
    StatsAggregator,
    StatsDenominator,
    compute_group_row,
)
from tests.fakes import make_stats


def _seed_worked_example(repo, referee_id=1, season=2025, league=135):
    yellows = [2, 3, 1, 4]
    reds = [0, 1, 0, 0]
    for i, (y, r) in enumerate(zip(yellows, reds), start=1):
        repo.add_match(
            referee_id * 100 + i,
            referee_id=referee_id,
            season=season,
            league_api_id=league,
            stats=make_stats(home_yellow=y, home_red=r),
        )


class TestComputeGroupRow:
    """Derived row for a single (referee, season, league) group."""

    def test_worked_example(self, stats_repo):
        _seed_worked_example(stats_repo)
        row = compute_group_row(SeasonLeagueKey(1, 2025, 135), stats_repo.matches)

        assert row.matches_officiated == 4
        assert row.matches_with_stats == 4
        assert row.total_yellow_cards == 10
        assert row.total_red_cards == 1
        assert row.avg_yellow_cards == pytest.approx(2.5)
        assert row.avg_red_cards == pytest.approx(0.25)
        assert row.strictness_index == pytest.approx(3.25)
        assert row.data_complete is True

    def test_strictness_weights_red_cards(self, stats_repo):
        stats_repo.add_match(1, stats=make_stats(home_yellow=1, away_red=1))
        row = compute_group_row(SeasonLeagueKey(1, 2025, 135), stats_repo.matches)
        assert row.strictness_index == pytest.approx(1 + RED_CARD_WEIGHT * 1)

    def test_home_bias_is_away_minus_home(self, stats_repo):
        stats_repo.add_match(1, stats=make_stats(home_yellow=1, away_yellow=3))
        stats_repo.add_match(2, stats=make_stats(home_yellow=2, away_yellow=2))
        row = compute_group_row(SeasonLeagueKey(1, 2025, 135), stats_repo.matches)
        assert row.home_bias_score == pytest.approx((5 - 3) / 2)

    def test_no_stats_gives_zero_averages_flagged_incomplete(self, stats_repo):
        """Officiated matches without stats rows: zero averages, marked as incomplete data."""
        for i in range(1, 5):
            stats_repo.add_match(i, stats=None)
        row = compute_group_row(SeasonLeagueKey(1, 2025, 135), stats_repo.matches)

        assert row.matches_officiated == 4
        assert row.matches_with_stats == 0
        assert row.avg_yellow_cards == 0
        assert row.strictness_index == 0
        assert row.data_complete is False
        assert row.stats_coverage == 0.0

    def test_partial_stats_denominator_policy(self, stats_repo):
        stats_repo.add_match(1, stats=make_stats(home_yellow=4))
        stats_repo.add_match(2, stats=None)
        key = SeasonLeagueKey(1, 2025, 135)

        officiated = compute_group_row(key, stats_repo.matches)
        with_stats = compute_group_row(key, stats_repo.matches, StatsDenominator.WITH_STATS)

        assert officiated.avg_yellow_cards == pytest.approx(2.0)
        assert with_stats.avg_yellow_cards == pytest.approx(4.0)
        assert officiated.stats_coverage == pytest.approx(0.5)


class TestStatsAggregator:
    """Batch recomputation across referees."""

    def test_one_row_per_league(self, stats_repo):
        _seed_worked_example(stats_repo, league=135)
        stats_repo.add_match(999, league_api_id=39, stats=make_stats(away_yellow=5))

        report = StatsAggregator(stats_repo).recompute(2025)

        assert report.ok
        assert report.referees_updated == 1
        assert report.rows_written == 2
        assert set(stats_repo.rows) == {SeasonLeagueKey(1, 2025, 135), SeasonLeagueKey(1, 2025, 39)}

    def test_recompute_is_idempotent(self, stats_repo):
        _seed_worked_example(stats_repo)
        aggregator = StatsAggregator(stats_repo)

        aggregator.recompute(2025)
        first = dict(stats_repo.rows)
        aggregator.recompute(2025)

        assert stats_repo.rows == first
        assert len(stats_repo.rows) == 1

    def test_matches_moved_to_other_league_drop_old_row(self, stats_repo):
        _seed_worked_example(stats_repo, league=135)
        aggregator = StatsAggregator(stats_repo)
        aggregator.recompute(2025)

        stats_repo.matches = [replace(m, league_api_id=39) for m in stats_repo.matches]
        report = aggregator.recompute(2025)

        assert set(stats_repo.rows) == {SeasonLeagueKey(1, 2025, 39)}
        assert report.rows_removed == 1

    def test_reassigned_referee_rows_cleared(self, stats_repo):
        _seed_worked_example(stats_repo, referee_id=1)
        aggregator = StatsAggregator(stats_repo)
        aggregator.recompute(2025)

        stats_repo.matches = [replace(m, referee_id=2) for m in stats_repo.matches]
        aggregator.recompute(2025)

        assert set(stats_repo.rows) == {SeasonLeagueKey(2, 2025, 135)}

    def test_other_season_rows_untouched(self, stats_repo):
        _seed_worked_example(stats_repo, season=2024)
        aggregator = StatsAggregator(stats_repo)
        aggregator.recompute(2024)

        aggregator.recompute(2025)

        assert set(stats_repo.rows) == {SeasonLeagueKey(1, 2024, 135)}

    def test_other_seasons_ignored(self, stats_repo):
        _seed_worked_example(stats_repo, season=2024)
        report = StatsAggregator(stats_repo).recompute(2025)
        assert report.referees_updated == 0
        assert stats_repo.rows == {}

    def test_failure_is_isolated(self, stats_repo):
        """One failing referee does not stop the others."""
        _seed_worked_example(stats_repo, referee_id=1)
        _seed_worked_example(stats_repo, referee_id=2)
        _seed_worked_example(stats_repo, referee_id=3)
        stats_repo.failing_referees.add(2)

        report = StatsAggregator(stats_repo).recompute(2025)

        assert not report.ok
        assert report.referees_updated == 2
        assert [f.referee_id for f in report.failures] == [2]
        assert "RuntimeError" in report.failures[0].error
        assert report.error == "1 referee(s) failed during aggregation"
        assert {k.referee_id for k in stats_repo.rows} == {1, 3}

    def test_parallel_matches_serial(self, stats_repo):
        for rid in range(1, 7):
            _seed_worked_example(stats_repo, referee_id=rid)

        serial = StatsAggregator(stats_repo, max_workers=1).recompute(2025)
        serial_rows = dict(stats_repo.rows)
        stats_repo.rows.clear()
        parallel = StatsAggregator(stats_repo, max_workers=4).recompute(2025)

        assert parallel.referees_updated == serial.referees_updated == 6
        assert stats_repo.rows == serial_rows

    def test_referee_listing_error_propagates(self, stats_repo):
        def broken(season):
            raise RuntimeError("store down")

        stats_repo.referee_ids_for_season = broken
        with pytest.raises(RuntimeError):
            StatsAggregator(stats_repo).recompute(2025)

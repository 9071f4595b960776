"""Data coverage: repository counts and endpoint on in-memory SQLite."""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.repositories import SqlStatsRepository
from app.repositories.deps import get_stats_repository


class TestDataCoverageRepository:
    def test_counts(self, seeded):
        coverage = SqlStatsRepository(seeded).data_coverage(2025)

        assert coverage.finished_matches == 5
        assert coverage.matches_with_stats == 4
        assert coverage.matches_with_referee == 5
        assert coverage.matches_missing_stats == 1
        assert coverage.coverage_percentage == pytest.approx(80.0)
        assert [m.match_id for m in coverage.incomplete_matches] == [6]

    def test_limit(self, seeded):
        coverage = SqlStatsRepository(seeded).data_coverage(2025, limit=0)
        assert coverage.incomplete_matches == []
        assert coverage.matches_missing_stats == 1


class TestDataCoverageEndpoint:
    def _get(self, seeded, season):
        app.dependency_overrides[get_stats_repository] = lambda: SqlStatsRepository(seeded)
        try:
            return TestClient(app).get("/api/data-coverage", params={"season": season})
        finally:
            app.dependency_overrides.clear()

    def test_coverage_reports_missing_stats(self, seeded):
        body = self._get(seeded, 2025).json()

        assert body["finishedMatches"] == 5
        assert body["matchesWithStats"] == 4
        assert body["matchesWithReferee"] == 5
        assert body["coveragePercentage"] == 80.0
        assert body["matchesMissingStats"] == 1
        assert [m["matchId"] for m in body["incompleteMatches"]] == [6]
        assert body["incompleteMatches"][0]["referee"] == "Daniele Orsato"
        assert body["incompleteMatches"][0]["homeTeam"]

    def test_empty_season(self, seeded):
        body = self._get(seeded, 1999).json()
        assert body["finishedMatches"] == 0
        assert body["coveragePercentage"] == 0.0
        assert body["incompleteMatches"] == []

"""In-memory implementations of the repository protocols."""

from datetime import datetime, timedelta

from app.analytics.records import (
    CardEventRecord,
    MatchRecord,
    RatingRecord,
    RefereeSeasonRow,
    StatsRecord,
)


def make_stats(
    home_yellow=0, away_yellow=0, home_red=0, away_red=0,
    home_fouls=0, away_fouls=0, home_penalties=0, away_penalties=0,
):
    """StatsRecord con totali coerenti con gli split casa/trasferta."""
    return StatsRecord(
        yellow_cards=home_yellow + away_yellow,
        red_cards=home_red + away_red,
        fouls=home_fouls + away_fouls,
        home_yellow_cards=home_yellow,
        away_yellow_cards=away_yellow,
        home_red_cards=home_red,
        away_red_cards=away_red,
        home_fouls=home_fouls,
        away_fouls=away_fouls,
        penalties=home_penalties + away_penalties,
        home_penalties=home_penalties,
        away_penalties=away_penalties,
    )


class FakeStatsRepository:
    def __init__(self):
        self.matches: list[MatchRecord] = []
        self.rows: dict = {}
        self.events: list[CardEventRecord] = []
        self.referees: set[int] = set()
        self.teams: set[int] = set()
        self.leagues: set[int] = set()
        self.failing_referees: set[int] = set()
        self.upsert_calls = 0

    def add_match(
        self,
        match_id,
        referee_id=1,
        season=2025,
        league_api_id=135,
        home_team_id=10,
        away_team_id=20,
        stats=None,
        date=None,
        home_goals=None,
        away_goals=None,
    ) -> MatchRecord:
        m = MatchRecord(
            id=match_id,
            league_api_id=league_api_id,
            season=season,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            referee_id=referee_id,
            date=date,
            stats=stats,
            home_goals=home_goals,
            away_goals=away_goals,
        )
        self.matches.append(m)
        if referee_id is not None:
            self.referees.add(referee_id)
        self.teams.update({home_team_id, away_team_id})
        self.leagues.add(league_api_id)
        return m

    def referee_ids_for_season(self, season):
        from_matches = {m.referee_id for m in self.matches if m.season == season and m.referee_id is not None}
        from_rows = {k.referee_id for k in self.rows if k.season == season}
        return sorted(from_matches | from_rows)

    def finished_matches(self, *, referee_id=None, season=None, league_api_id=None, team_id=None, require_referee=False):
        if referee_id in self.failing_referees:
            raise RuntimeError(f"boom for referee {referee_id}")
        out = []
        for m in self.matches:
            if referee_id is not None and m.referee_id != referee_id:
                continue
            if require_referee and m.referee_id is None:
                continue
            if season is not None and m.season != season:
                continue
            if league_api_id is not None and m.league_api_id != league_api_id:
                continue
            if team_id is not None and team_id not in (m.home_team_id, m.away_team_id):
                continue
            out.append(m)
        return sorted(out, key=lambda m: m.id)

    def upsert_referee_season_stats(self, row: RefereeSeasonRow):
        self.upsert_calls += 1
        self.rows[row.key] = row

    def delete_stale_referee_season_stats(self, referee_id, season, keep_league_ids):
        stale = [
            k for k in self.rows
            if k.referee_id == referee_id and k.season == season and k.league_api_id not in keep_league_ids
        ]
        for k in stale:
            del self.rows[k]
        return len(stale)

    def referee_season_rows(self, referee_id, season=None, league_api_id=None):
        return [
            r for k, r in sorted(self.rows.items())
            if k.referee_id == referee_id
            and (season is None or k.season == season)
            and (league_api_id is None or k.league_api_id == league_api_id)
        ]

    def card_events(self, referee_id=None):
        return [e for e in self.events if referee_id is None or e.referee_id == referee_id]

    def referee_exists(self, referee_id):
        return referee_id in self.referees

    def team_exists(self, team_id):
        return team_id in self.teams

    def league_exists(self, league_api_id):
        return league_api_id in self.leagues


class FakeRatingRepository:
    def __init__(self, referee_ids=()):
        self.referee_ids = set(referee_ids)
        self.ratings: dict[tuple[int, str], RatingRecord] = {}
        self._clock = datetime(2025, 1, 1, 12, 0, 0)

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    def referee_exists(self, referee_id):
        return referee_id in self.referee_ids

    def upsert_rating(self, referee_id, identity_hash, rating, comment):
        now = self._tick()
        previous = self.ratings.get((referee_id, identity_hash))
        record = RatingRecord(
            referee_id=referee_id,
            identity_hash=identity_hash,
            rating=rating,
            comment=comment,
            created_at=previous.created_at if previous else now,
            updated_at=now,
        )
        self.ratings[(referee_id, identity_hash)] = record
        return record

    def list_ratings(self, referee_id):
        rows = [r for (rid, _), r in self.ratings.items() if rid == referee_id]
        return sorted(rows, key=lambda r: r.updated_at, reverse=True)

    def get_rating(self, referee_id, identity_hash):
        return self.ratings.get((referee_id, identity_hash))

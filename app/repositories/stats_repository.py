"""
Stats Store su SQLAlchemy.
Ogni metodo apre una sessione breve dalla factory: il repository è sicuro
da usare da più worker in parallelo, nessuna sessione condivisa tra thread.
"""

import logging
from dataclasses import asdict

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased, sessionmaker

from app.analytics.records import (
    CardEventRecord,
    DataCoverage,
    IncompleteMatch,
    MatchRecord,
    RefereeSeasonRow,
    StatsRecord,
)
from app.core.errors import InternalComputationError
from app.models import (
    FINISHED_STATUSES,
    CardEvent,
    League,
    Match,
    MatchStats,
    Referee,
    RefereeSeasonStats,
    Team,
)
from app.repositories.upsert import upsert

logger = logging.getLogger(__name__)

_STATS_FIELDS = (
    "yellow_cards", "red_cards", "fouls", "penalties",
    "home_yellow_cards", "home_red_cards", "home_fouls", "home_penalties",
    "away_yellow_cards", "away_red_cards", "away_fouls", "away_penalties",
)

_SEASON_ROW_KEY = ["referee_id", "season", "league_api_id"]

INCOMPLETE_MATCHES_LIMIT = 10


def _to_stats_record(stats: MatchStats | None) -> StatsRecord | None:
    if stats is None:
        return None
    return StatsRecord(**{f: getattr(stats, f) or 0 for f in _STATS_FIELDS})


def _to_match_record(match: Match, league_api_id: int, stats: MatchStats | None) -> MatchRecord:
    if league_api_id is None:
        raise InternalComputationError(f"Match {match.id}: lega senza api_id")
    return MatchRecord(
        id=match.id,
        league_api_id=league_api_id,
        season=match.season,
        home_team_id=match.home_team_id,
        away_team_id=match.away_team_id,
        referee_id=match.referee_id,
        date=match.date,
        stats=_to_stats_record(stats),
        home_goals=match.home_goals,
        away_goals=match.away_goals,
    )


def _to_season_row(r: RefereeSeasonStats) -> RefereeSeasonRow:
    return RefereeSeasonRow(
        referee_id=r.referee_id,
        season=r.season,
        league_api_id=r.league_api_id,
        matches_officiated=r.matches_officiated,
        matches_with_stats=r.matches_with_stats,
        total_yellow_cards=r.total_yellow_cards,
        total_red_cards=r.total_red_cards,
        avg_yellow_cards=r.avg_yellow_cards,
        avg_red_cards=r.avg_red_cards,
        strictness_index=r.strictness_index,
        home_bias_score=r.home_bias_score,
    )


class SqlStatsRepository:
    """Implementazione di StatsRepository su PostgreSQL (o SQLite nei test)."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def referee_ids_for_season(self, season: int) -> list[int]:
        db = self._session()
        try:
            from_matches = (
                db.query(Match.referee_id)
                .filter(
                    Match.season == season,
                    Match.referee_id.isnot(None),
                    Match.status.in_(FINISHED_STATUSES),
                )
                .distinct()
                .all()
            )
            # Anche chi ha solo righe salvate: se le partite sono sparite vanno ripulite
            from_rows = (
                db.query(RefereeSeasonStats.referee_id)
                .filter(RefereeSeasonStats.season == season)
                .distinct()
                .all()
            )
            return sorted({r[0] for r in from_matches} | {r[0] for r in from_rows})
        except SQLAlchemyError as e:
            logger.exception("referee_ids_for_season season=%s: %s", season, e)
            raise InternalComputationError("Stats store non raggiungibile") from e
        finally:
            db.close()

    def finished_matches(
        self,
        *,
        referee_id: int | None = None,
        season: int | None = None,
        league_api_id: int | None = None,
        team_id: int | None = None,
        require_referee: bool = False,
    ) -> list[MatchRecord]:
        db = self._session()
        try:
            q = (
                db.query(Match, League.api_id, MatchStats)
                .join(League, Match.league_id == League.id)
                .outerjoin(MatchStats, MatchStats.match_id == Match.id)
                .filter(Match.status.in_(FINISHED_STATUSES))
            )
            if referee_id is not None:
                q = q.filter(Match.referee_id == referee_id)
            elif require_referee:
                q = q.filter(Match.referee_id.isnot(None))
            if season is not None:
                q = q.filter(Match.season == season)
            if league_api_id is not None:
                q = q.filter(League.api_id == league_api_id)
            if team_id is not None:
                q = q.filter(or_(Match.home_team_id == team_id, Match.away_team_id == team_id))
            rows = q.order_by(Match.id).all()
            return [_to_match_record(m, api_id, s) for m, api_id, s in rows]
        except SQLAlchemyError as e:
            logger.exception(
                "finished_matches referee_id=%s season=%s league=%s team_id=%s: %s",
                referee_id, season, league_api_id, team_id, e,
            )
            raise InternalComputationError("Stats store non raggiungibile") from e
        finally:
            db.close()

    def upsert_referee_season_stats(self, row: RefereeSeasonRow) -> None:
        db = self._session()
        try:
            upsert(db, RefereeSeasonStats, asdict(row), conflict_columns=_SEASON_ROW_KEY)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("upsert referee_season_stats key=%s: %s", row.key, e)
            raise InternalComputationError("Scrittura referee_season_stats fallita") from e
        finally:
            db.close()

    def delete_stale_referee_season_stats(
        self,
        referee_id: int,
        season: int,
        keep_league_ids: list[int],
    ) -> int:
        db = self._session()
        try:
            q = db.query(RefereeSeasonStats).filter(
                RefereeSeasonStats.referee_id == referee_id,
                RefereeSeasonStats.season == season,
            )
            if keep_league_ids:
                q = q.filter(RefereeSeasonStats.league_api_id.notin_(keep_league_ids))
            deleted = q.delete(synchronize_session=False)
            db.commit()
            return deleted
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("delete stale referee_season_stats referee_id=%s season=%s: %s", referee_id, season, e)
            raise InternalComputationError("Pulizia referee_season_stats fallita") from e
        finally:
            db.close()

    def referee_season_rows(
        self,
        referee_id: int,
        season: int | None = None,
        league_api_id: int | None = None,
    ) -> list[RefereeSeasonRow]:
        db = self._session()
        try:
            q = db.query(RefereeSeasonStats).filter(RefereeSeasonStats.referee_id == referee_id)
            if season is not None:
                q = q.filter(RefereeSeasonStats.season == season)
            if league_api_id is not None:
                q = q.filter(RefereeSeasonStats.league_api_id == league_api_id)
            rows = q.order_by(RefereeSeasonStats.season.desc(), RefereeSeasonStats.league_api_id).all()
            return [_to_season_row(r) for r in rows]
        except SQLAlchemyError as e:
            logger.exception("referee_season_rows referee_id=%s: %s", referee_id, e)
            raise InternalComputationError("Stats store non raggiungibile") from e
        finally:
            db.close()

    def card_events(self, referee_id: int | None = None) -> list[CardEventRecord]:
        db = self._session()
        try:
            q = (
                db.query(CardEvent, MatchStats.match_id, Match.referee_id)
                .join(MatchStats, CardEvent.match_stats_id == MatchStats.id)
                .join(Match, MatchStats.match_id == Match.id)
            )
            if referee_id is not None:
                q = q.filter(Match.referee_id == referee_id)
            rows = q.order_by(MatchStats.match_id, CardEvent.minute, CardEvent.id).all()
            return [
                CardEventRecord(
                    match_id=match_id,
                    referee_id=ref_id,
                    minute=ev.minute,
                    extra_minute=ev.extra_minute,
                    type=ev.type,
                    team_side=ev.team_side,
                    player_name=ev.player_name,
                )
                for ev, match_id, ref_id in rows
            ]
        except SQLAlchemyError as e:
            logger.exception("card_events referee_id=%s: %s", referee_id, e)
            raise InternalComputationError("Stats store non raggiungibile") from e
        finally:
            db.close()

    def data_coverage(self, season: int, limit: int = INCOMPLETE_MATCHES_LIMIT) -> DataCoverage:
        db = self._session()
        try:
            finished = db.query(Match).filter(Match.season == season, Match.status.in_(FINISHED_STATUSES))
            matches_count = finished.count()
            if matches_count == 0:
                return DataCoverage(season=season)

            with_stats = finished.join(MatchStats, MatchStats.match_id == Match.id).count()
            with_referee = finished.filter(Match.referee_id.isnot(None)).count()

            home_alias = aliased(Team)
            away_alias = aliased(Team)
            incomplete_rows = (
                db.query(
                    Match.id.label("match_id"),
                    Match.date,
                    home_alias.name.label("home_team"),
                    away_alias.name.label("away_team"),
                    Referee.name.label("referee"),
                )
                .join(home_alias, Match.home_team_id == home_alias.id)
                .join(away_alias, Match.away_team_id == away_alias.id)
                .outerjoin(Referee, Match.referee_id == Referee.id)
                .outerjoin(MatchStats, MatchStats.match_id == Match.id)
                .filter(
                    Match.season == season,
                    Match.status.in_(FINISHED_STATUSES),
                    MatchStats.id.is_(None),
                )
                .order_by(Match.date.desc())
                .limit(limit)
                .all()
            )
            return DataCoverage(
                season=season,
                finished_matches=matches_count,
                matches_with_stats=with_stats,
                matches_with_referee=with_referee,
                incomplete_matches=[
                    IncompleteMatch(
                        match_id=r.match_id,
                        date=r.date,
                        home_team=r.home_team or "",
                        away_team=r.away_team or "",
                        referee=r.referee,
                    )
                    for r in incomplete_rows
                ],
            )
        except SQLAlchemyError as e:
            logger.exception("data_coverage season=%s: %s", season, e)
            raise InternalComputationError("Stats store non raggiungibile") from e
        finally:
            db.close()

    def _exists(self, model, *criteria) -> bool:
        db = self._session()
        try:
            return db.query(model.id).filter(*criteria).first() is not None
        except SQLAlchemyError as e:
            logger.exception("exists %s: %s", model.__tablename__, e)
            raise InternalComputationError("Stats store non raggiungibile") from e
        finally:
            db.close()

    def referee_exists(self, referee_id: int) -> bool:
        return self._exists(Referee, Referee.id == referee_id)

    def team_exists(self, team_id: int) -> bool:
        return self._exists(Team, Team.id == team_id)

    def league_exists(self, league_api_id: int) -> bool:
        return self._exists(League, League.api_id == league_api_id)

"""Voti arbitri su SQLAlchemy: upsert sulla chiave (referee_id, ip_hash)."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql import func

from app.analytics.records import RatingRecord
from app.core.errors import InternalComputationError
from app.models import Referee, RefereeRating
from app.repositories.upsert import upsert

logger = logging.getLogger(__name__)


def _to_record(r: RefereeRating) -> RatingRecord:
    return RatingRecord(
        referee_id=r.referee_id,
        identity_hash=r.ip_hash,
        rating=r.rating,
        comment=r.comment,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


class SqlRatingRepository:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def referee_exists(self, referee_id: int) -> bool:
        db = self._session_factory()
        try:
            return db.query(Referee.id).filter(Referee.id == referee_id).first() is not None
        except SQLAlchemyError as e:
            logger.exception("referee_exists referee_id=%s: %s", referee_id, e)
            raise InternalComputationError("Stats store non raggiungibile") from e
        finally:
            db.close()

    def upsert_rating(
        self,
        referee_id: int,
        identity_hash: str,
        rating: int,
        comment: str | None,
    ) -> RatingRecord:
        db = self._session_factory()
        try:
            upsert(
                db,
                RefereeRating,
                {
                    "referee_id": referee_id,
                    "ip_hash": identity_hash,
                    "rating": rating,
                    "comment": comment,
                },
                conflict_columns=["referee_id", "ip_hash"],
                update_values={"updated_at": func.now()},
            )
            db.commit()
            saved = (
                db.query(RefereeRating)
                .filter(
                    RefereeRating.referee_id == referee_id,
                    RefereeRating.ip_hash == identity_hash,
                )
                .one()
            )
            return _to_record(saved)
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("upsert_rating referee_id=%s: %s", referee_id, e)
            raise InternalComputationError("Salvataggio voto fallito") from e
        finally:
            db.close()

    def list_ratings(self, referee_id: int) -> list[RatingRecord]:
        db = self._session_factory()
        try:
            rows = (
                db.query(RefereeRating)
                .filter(RefereeRating.referee_id == referee_id)
                .order_by(RefereeRating.updated_at.desc(), RefereeRating.id.desc())
                .all()
            )
            return [_to_record(r) for r in rows]
        except SQLAlchemyError as e:
            logger.exception("list_ratings referee_id=%s: %s", referee_id, e)
            raise InternalComputationError("Stats store non raggiungibile") from e
        finally:
            db.close()

    def get_rating(self, referee_id: int, identity_hash: str) -> RatingRecord | None:
        db = self._session_factory()
        try:
            row = (
                db.query(RefereeRating)
                .filter(
                    RefereeRating.referee_id == referee_id,
                    RefereeRating.ip_hash == identity_hash,
                )
                .first()
            )
            return _to_record(row) if row else None
        except SQLAlchemyError as e:
            logger.exception("get_rating referee_id=%s: %s", referee_id, e)
            raise InternalComputationError("Stats store non raggiungibile") from e
        finally:
            db.close()

"""
Voti anonimi arbitri: GET riepilogo, POST invio/aggiornamento.
L'identità è l'hash salato dell'IP del chiamante, calcolato qui.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.errors import InternalComputationError, NotFoundError, ValidationError
from app.core.security import client_address, hash_identity
from app.repositories.deps import get_rating_repository
from app.schemas.ratings import (
    RatingSubmitRequest,
    RatingSubmitResponse,
    RatingSummaryResponse,
    RecentCommentItem,
)
from app.services.rating_service import RatingAggregator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/referees", tags=["ratings"])


def _identity(request: Request) -> str:
    fallback = request.client.host if request.client else None
    return hash_identity(client_address(request.headers, fallback))


@router.get("/{referee_id}/ratings", response_model=RatingSummaryResponse)
def get_ratings(referee_id: int, request: Request, repo=Depends(get_rating_repository)):
    """Totale, media (1 decimale), distribuzione 1-5, ultimi commenti e voto del chiamante."""
    try:
        summary = RatingAggregator(repo).summary(referee_id, _identity(request))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InternalComputationError as e:
        logger.exception("get_ratings referee_id=%s: %s", referee_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch ratings")

    return RatingSummaryResponse(
        total_ratings=summary.total_ratings,
        average_rating=summary.average_rating,
        distribution=summary.distribution,
        recent_comments=[
            RecentCommentItem(rating=c.rating, comment=c.comment, created_at=c.created_at)
            for c in summary.recent_comments
        ],
        user_rating=summary.user_rating,
    )


@router.post("/{referee_id}/ratings", response_model=RatingSubmitResponse)
def submit_rating(
    referee_id: int,
    payload: RatingSubmitRequest,
    request: Request,
    repo=Depends(get_rating_repository),
):
    """Crea o aggiorna il voto del chiamante. Un solo voto per identità."""
    try:
        result = RatingAggregator(repo).submit(
            referee_id=referee_id,
            rating=payload.rating,
            comment=payload.comment,
            identity_hash=_identity(request),
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InternalComputationError as e:
        logger.exception("submit_rating referee_id=%s: %s", referee_id, e)
        raise HTTPException(status_code=500, detail="Failed to save rating")

    return RatingSubmitResponse(
        success=True,
        rating=result.rating,
        total_ratings=result.total_ratings,
        average_rating=result.average_rating,
    )

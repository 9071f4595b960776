"""Combinazioni arbitro-squadra: tasso di over cartellini e compatibilità."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query

from app.analytics.combo_finder import ComboFinder
from app.core.errors import InternalComputationError, NotFoundError, ValidationError
from app.repositories.deps import get_stats_repository
from app.schemas.probability import ComboItem, ComboListResponse, CompatibilityResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/combos", tags=["combos"])


@router.get("", response_model=ComboListResponse)
def rank_combos(
    threshold: float = 3.5,
    season: int | None = None,
    limit: int | None = None,
    repo=Depends(get_stats_repository),
):
    """Combo con almeno 3 partite, ordinate per overRate alla soglia (2.5, 3.5 o 4.5)."""
    try:
        combos = ComboFinder(repo).rank_combos(threshold, season=season, limit=limit)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InternalComputationError as e:
        logger.exception("rank_combos threshold=%s: %s", threshold, e)
        raise HTTPException(status_code=500, detail="Internal error")

    items = []
    for c in combos:
        data = asdict(c)
        data.pop("threshold")
        items.append(ComboItem(**data))
    return ComboListResponse(threshold=threshold, season=season, combos=items)


@router.get("/compatibility", response_model=CompatibilityResponse)
def compatibility(
    referee_id: int = Query(..., alias="refereeId"),
    team_id: int = Query(..., alias="teamId"),
    season: int | None = None,
    repo=Depends(get_stats_repository),
):
    """
    Punteggio 0-100 della squadra con l'arbitro: sopra 50 meno cartellini
    dell'atteso e/o più vittorie. Senza precedenti con stats: 50, neutral.
    """
    try:
        result = ComboFinder(repo).compatibility(referee_id, team_id, season=season)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InternalComputationError as e:
        logger.exception("compatibility referee_id=%s team_id=%s: %s", referee_id, team_id, e)
        raise HTTPException(status_code=500, detail="Internal error")

    s = result.score
    return CompatibilityResponse(
        referee_id=result.referee_id,
        team_id=result.team_id,
        season=result.season,
        score=s.score,
        rating=s.rating,
        card_tendency=s.card_tendency,
        historical_matches=s.matches,
        avg_cards_in_history=s.avg_cards_in_history,
        deviation_percent=s.deviation_percent,
        win_rate=s.win_rate,
        referee_avg_yellow=round(result.referee_avg_yellow, 2),
        team_avg_yellow=round(result.team_avg_yellow, 2),
    )

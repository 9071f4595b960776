"""Tolleranza falli a livello di lega."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from app.analytics.foul_leniency import FoulLeniencyAnalyzer
from app.analytics.records import InsufficientData
from app.core.errors import InternalComputationError
from app.repositories.deps import get_stats_repository
from app.schemas.referees import InsufficientDataResponse, LeniencyResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leagues", tags=["leagues"])


@router.get("/{league_api_id}/leniency", response_model=LeniencyResponse | InsufficientDataResponse)
def league_leniency(league_api_id: int, season: int | None = None, repo=Depends(get_stats_repository)):
    try:
        if not repo.league_exists(league_api_id):
            raise HTTPException(status_code=404, detail=f"League {league_api_id} not found")
        result = FoulLeniencyAnalyzer(repo).analyze_league(league_api_id, season=season)
    except InternalComputationError as e:
        logger.exception("league_leniency league=%s: %s", league_api_id, e)
        raise HTTPException(status_code=500, detail="Internal error")
    if isinstance(result, InsufficientData):
        return InsufficientDataResponse(entity_id=result.entity_id, matches=result.matches, required=result.required)
    return LeniencyResponse(**asdict(result))

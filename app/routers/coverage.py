"""
Copertura dati per stagione: partite concluse, quante hanno stats,
percentuale e lista (max 10) delle partite senza stats.
Solo lettura.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.core.errors import InternalComputationError
from app.repositories.deps import get_stats_repository
from app.schemas.coverage import DataCoverageResponse, IncompleteMatchItem

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["coverage"])


@router.get("/data-coverage", response_model=DataCoverageResponse)
def data_coverage(season: int, repo=Depends(get_stats_repository)):
    """
    Le medie per arbitro dividono per le partite dirette: una copertura
    bassa qui significa medie sottostimate in referee_season_stats.
    """
    try:
        coverage = repo.data_coverage(season)
    except InternalComputationError as e:
        logger.exception("data_coverage season=%s: %s", season, e)
        raise HTTPException(status_code=500, detail="Internal error")

    return DataCoverageResponse(
        season=coverage.season,
        finished_matches=coverage.finished_matches,
        matches_with_stats=coverage.matches_with_stats,
        matches_with_referee=coverage.matches_with_referee,
        coverage_percentage=round(coverage.coverage_percentage, 2),
        matches_missing_stats=coverage.matches_missing_stats,
        incomplete_matches=[
            IncompleteMatchItem(
                match_id=m.match_id,
                date=m.date,
                home_team=m.home_team,
                away_team=m.away_team,
                referee=m.referee,
            )
            for m in coverage.incomplete_matches
        ],
    )

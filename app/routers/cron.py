"""
Job schedulato: ricalcolo RefereeSeasonStats.
Protetto da bearer token (CRON_SECRET). Non chiama API esterne,
usa solo i dati già presenti nel database.
"""

import logging
import time

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse

from app.analytics.stats_aggregator import StatsAggregator
from app.core.config import get_aggregation_workers, get_current_season
from app.core.errors import Unauthorized
from app.core.security import verify_bearer_token
from app.repositories.deps import get_stats_repository
from app.schemas.cron import UpdateStatsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])


@router.get("/update-stats", response_model=UpdateStatsResponse)
def update_stats(
    season: int | None = None,
    authorization: str | None = Header(default=None),
    repo=Depends(get_stats_repository),
):
    """
    Ricalcola le statistiche arbitro della stagione (default: stagione corrente).
    Errori per singolo arbitro non interrompono il batch: la risposta riporta
    comunque refereesUpdated, con status 500 se qualcosa è fallito.
    """
    try:
        verify_bearer_token(authorization)
    except Unauthorized as e:
        logger.warning("update-stats rifiutato: %s", e)
        raise HTTPException(status_code=401, detail="Unauthorized")

    season = season or get_current_season()
    started = time.monotonic()
    aggregator = StatsAggregator(repo, max_workers=get_aggregation_workers())
    try:
        report = aggregator.recompute(season)
    except Exception as e:
        logger.exception("update-stats season=%s fallito: %s", season, e)
        body = UpdateStatsResponse(
            success=False,
            referees_updated=0,
            duration_ms=int((time.monotonic() - started) * 1000),
            error="Stats recomputation failed",
        )
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True))

    body = UpdateStatsResponse(
        success=report.ok,
        referees_updated=report.referees_updated,
        duration_ms=int((time.monotonic() - started) * 1000),
        error=report.error,
    )
    if not report.ok:
        for failure in report.failures:
            logger.error("update-stats season=%s arbitro %s: %s", season, failure.referee_id, failure.error)
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True))
    return body

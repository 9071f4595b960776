"""
Analisi per arbitro: bias casa/trasferta, tolleranza falli, rigori, forma recente,
timing cartellini, statistiche stagionali derivate. Solo lettura.
Sotto la soglia minima di partite la risposta è 200 con status insufficient_data.
"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from app.analytics.bias_calculator import BiasCalculator, BiasResult
from app.analytics.card_timing import PERIODS, card_timing_profile
from app.analytics.foul_leniency import FoulLeniencyAnalyzer, LeniencyResult
from app.analytics.penalty_stats import PenaltyAnalyzer, RefereePenaltyStats
from app.analytics.records import InsufficientData
from app.analytics.rounding import round_half_up
from app.core.errors import InternalComputationError, NotFoundError, ValidationError
from app.repositories.deps import get_stats_repository
from app.schemas.referees import (
    BiasRankingResponse,
    BiasResponse,
    CardTimingResponse,
    InsufficientDataResponse,
    LeniencyOverviewResponse,
    LeaguePenaltyItem,
    LeniencyResponse,
    PenaltyMatchItem,
    PenaltyOverviewResponse,
    PeriodCountItem,
    RefereeFormResponse,
    RefereePenaltyResponse,
    RefereeSeasonStatsItem,
)
from app.services.prediction_service import PredictionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/referees", tags=["referees"])


def _insufficient(result: InsufficientData) -> InsufficientDataResponse:
    return InsufficientDataResponse(entity_id=result.entity_id, matches=result.matches, required=result.required)


def _bias(result: BiasResult) -> BiasResponse:
    return BiasResponse(**asdict(result))


def _leniency(result: LeniencyResult) -> LeniencyResponse:
    return LeniencyResponse(**asdict(result))


def _penalties(result: RefereePenaltyStats) -> RefereePenaltyResponse:
    return RefereePenaltyResponse(
        **{k: v for k, v in asdict(result).items() if k != "recent_penalty_matches"},
        recent_penalty_matches=[
            PenaltyMatchItem(
                match_id=m.match_id,
                date=m.date,
                home_team_id=m.home_team_id,
                away_team_id=m.away_team_id,
                home_penalties=m.home_penalties,
                away_penalties=m.away_penalties,
                total=m.total,
            )
            for m in result.recent_penalty_matches
        ],
    )


def _require_referee(repo, referee_id: int) -> None:
    try:
        exists = repo.referee_exists(referee_id)
    except InternalComputationError:
        raise HTTPException(status_code=500, detail="Internal error")
    if not exists:
        raise HTTPException(status_code=404, detail=f"Referee {referee_id} not found")


@router.get("/bias", response_model=BiasRankingResponse)
def bias_ranking(season: int | None = None, repo=Depends(get_stats_repository)):
    """Arbitri con almeno 5 partite con stats, per |biasScore| decrescente."""
    try:
        results = BiasCalculator(repo).rank_bias(season=season)
    except InternalComputationError as e:
        logger.exception("bias_ranking season=%s: %s", season, e)
        raise HTTPException(status_code=500, detail="Internal error")
    return BiasRankingResponse(season=season, referees=[_bias(r) for r in results])


@router.get("/leniency", response_model=LeniencyOverviewResponse)
def leniency_overview(season: int | None = None, repo=Depends(get_stats_repository)):
    """Panoramica falli: arbitri e leghe qualificati più i totali complessivi."""
    try:
        overview = FoulLeniencyAnalyzer(repo).analyze_all(season=season)
    except InternalComputationError as e:
        logger.exception("leniency_overview season=%s: %s", season, e)
        raise HTTPException(status_code=500, detail="Internal error")
    return LeniencyOverviewResponse(
        season=season,
        referees=[_leniency(r) for r in overview.referees],
        leagues=[_leniency(r) for r in overview.leagues],
        total_matches=overview.total_matches,
        total_fouls=overview.total_fouls,
        avg_fouls=overview.avg_fouls,
        avg_foul_to_card=overview.avg_foul_to_card,
    )


@router.get("/penalties", response_model=PenaltyOverviewResponse)
def penalty_overview(season: int | None = None, repo=Depends(get_stats_repository)):
    """Arbitri con almeno 5 partite concluse per avgPenalties decrescente, leghe e totali."""
    try:
        overview = PenaltyAnalyzer(repo).overview(season=season)
    except InternalComputationError as e:
        logger.exception("penalty_overview season=%s: %s", season, e)
        raise HTTPException(status_code=500, detail="Internal error")
    return PenaltyOverviewResponse(
        season=season,
        referees=[_penalties(r) for r in overview.referees],
        leagues=[LeaguePenaltyItem(**asdict(l)) for l in overview.leagues],
        total_matches=overview.total_matches,
        total_penalties=overview.total_penalties,
        avg_penalties=overview.avg_penalties,
        matches_with_penalty=overview.matches_with_penalty,
    )


@router.get("/{referee_id}/bias", response_model=BiasResponse | InsufficientDataResponse)
def referee_bias(referee_id: int, season: int | None = None, repo=Depends(get_stats_repository)):
    _require_referee(repo, referee_id)
    try:
        result = BiasCalculator(repo).compute_bias(referee_id, season=season)
    except InternalComputationError as e:
        logger.exception("referee_bias referee_id=%s: %s", referee_id, e)
        raise HTTPException(status_code=500, detail="Internal error")
    if isinstance(result, InsufficientData):
        return _insufficient(result)
    return _bias(result)


@router.get("/{referee_id}/leniency", response_model=LeniencyResponse | InsufficientDataResponse)
def referee_leniency(referee_id: int, season: int | None = None, repo=Depends(get_stats_repository)):
    _require_referee(repo, referee_id)
    try:
        result = FoulLeniencyAnalyzer(repo).analyze_referee(referee_id, season=season)
    except InternalComputationError as e:
        logger.exception("referee_leniency referee_id=%s: %s", referee_id, e)
        raise HTTPException(status_code=500, detail="Internal error")
    if isinstance(result, InsufficientData):
        return _insufficient(result)
    return _leniency(result)


@router.get("/{referee_id}/card-timing", response_model=CardTimingResponse | InsufficientDataResponse)
def referee_card_timing(referee_id: int, repo=Depends(get_stats_repository)):
    """Cartellini per fascia di minuti (da card_events)."""
    _require_referee(repo, referee_id)
    try:
        profile = card_timing_profile(repo, referee_id)
    except InternalComputationError as e:
        logger.exception("referee_card_timing referee_id=%s: %s", referee_id, e)
        raise HTTPException(status_code=500, detail="Internal error")
    if isinstance(profile, InsufficientData):
        return _insufficient(profile)
    return CardTimingResponse(
        referee_id=profile.referee_id,
        total=profile.total,
        matches=profile.matches,
        first_half=profile.first_half,
        second_half=profile.second_half,
        injury_time=profile.injury_time,
        early_cards=profile.early_cards,
        late_cards=profile.late_cards,
        periods=[
            PeriodCountItem(
                period=p,
                yellow=profile.periods[p].yellow,
                red=profile.periods[p].red,
                total=profile.periods[p].total,
            )
            for p in PERIODS
        ],
    )


@router.get("/{referee_id}/season-stats", response_model=list[RefereeSeasonStatsItem])
def referee_season_stats(
    referee_id: int,
    season: int | None = None,
    repo=Depends(get_stats_repository),
):
    """
    Righe RefereeSeasonStats dell'arbitro. statsCoverage < 1 segnala medie
    sottostimate per statistiche mancanti: non leggerle come arbitro permissivo.
    """
    _require_referee(repo, referee_id)
    try:
        rows = repo.referee_season_rows(referee_id, season=season)
    except InternalComputationError as e:
        logger.exception("referee_season_stats referee_id=%s: %s", referee_id, e)
        raise HTTPException(status_code=500, detail="Internal error")
    return [
        RefereeSeasonStatsItem(
            **asdict(r),
            stats_coverage=round(r.stats_coverage, 4),
            data_complete=r.data_complete,
        )
        for r in rows
    ]


@router.get("/{referee_id}/penalties", response_model=RefereePenaltyResponse | InsufficientDataResponse)
def referee_penalties(referee_id: int, season: int | None = None, repo=Depends(get_stats_repository)):
    _require_referee(repo, referee_id)
    try:
        result = PenaltyAnalyzer(repo).referee_penalties(referee_id, season=season)
    except InternalComputationError as e:
        logger.exception("referee_penalties referee_id=%s: %s", referee_id, e)
        raise HTTPException(status_code=500, detail="Internal error")
    if isinstance(result, InsufficientData):
        return _insufficient(result)
    return _penalties(result)


@router.get("/{referee_id}/form", response_model=RefereeFormResponse)
def referee_form(referee_id: int, season: int | None = None, window: int = 5, repo=Depends(get_stats_repository)):
    """
    Trend dei gialli nelle ultime partite. trend "declining" = sempre più
    cartellini; formRating alto = arbitro costante.
    """
    try:
        result = PredictionService(repo).referee_form(referee_id, season=season, window=window)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InternalComputationError as e:
        logger.exception("referee_form referee_id=%s: %s", referee_id, e)
        raise HTTPException(status_code=500, detail="Internal error")
    f = result.form
    return RefereeFormResponse(
        referee_id=result.referee_id,
        season=result.season,
        trend=f.trend,
        trend_score=f.trend_score,
        avg_recent=f.avg_recent,
        avg_season=round_half_up(f.avg_season, 2),
        volatility=f.volatility,
        form_rating=f.form_rating,
        matches=f.matches,
        recent_match_ids=result.recent_match_ids,
    )

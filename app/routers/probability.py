"""
Probabilità over/under cartellini ed expected value contro le quote bookmaker.
Pure letture, nessuna scrittura.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from app.analytics.card_probability import CardProbabilityModel
from app.core.config import get_current_season
from app.core.errors import (
    InsufficientDataError,
    InternalComputationError,
    NotFoundError,
    ValidationError,
)
from app.repositories.deps import get_stats_repository
from app.schemas.probability import (
    FixturePredictionResponse,
    LineItem,
    OverUnderResponse,
    RecommendationItem,
    ValueSignalItem,
)
from app.schemas.referees import InsufficientDataResponse
from app.services.prediction_service import PredictionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/probability", tags=["probability"])


@router.get("/over-under", response_model=OverUnderResponse)
def over_under(
    lam: float = Query(..., alias="lambda"),
    threshold: float = 3.5,
    odds: float | None = None,
):
    """P(over)/P(under) per lambda e soglia dati; con odds calcola anche l'EV dell'over."""
    model = CardProbabilityModel()
    try:
        p_over, p_under = model.over_under_probability(lam, threshold)
        ev = model.expected_value(p_over, odds) if odds is not None else None
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return OverUnderResponse(
        lambda_=lam,
        threshold=threshold,
        p_over=p_over,
        p_under=p_under,
        odds=odds,
        ev=ev,
        is_value=(ev > 0) if ev is not None else None,
    )


@router.get("/fixture", response_model=FixturePredictionResponse | InsufficientDataResponse)
def fixture_prediction(
    referee_id: int = Query(..., alias="refereeId"),
    home_team_id: int = Query(..., alias="homeTeamId"),
    away_team_id: int = Query(..., alias="awayTeamId"),
    season: int | None = None,
    league_api_id: int | None = Query(default=None, alias="leagueApiId"),
    threshold: float = 3.5,
    over_odds: float | None = Query(default=None, alias="overOdds"),
    under_odds: float | None = Query(default=None, alias="underOdds"),
    repo=Depends(get_stats_repository),
):
    """
    Cartellini attesi per arbitro + squadre, linee 2.5/3.5/4.5, confidenza,
    linea consigliata e segnali EV se vengono passate le quote.
    statsCoverage < 1: storico arbitro con stats parziali.
    """
    season = season or get_current_season()
    try:
        result = PredictionService(repo).predict_fixture(
            referee_id=referee_id,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            season=season,
            league_api_id=league_api_id,
            threshold=threshold,
            over_odds=over_odds,
            under_odds=under_odds,
        )
    except InsufficientDataError as e:
        logger.info("fixture_prediction ref=%s season=%s: %s", referee_id, season, e)
        return InsufficientDataResponse(entity_id=referee_id, matches=0, required=1)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InternalComputationError as e:
        logger.exception("fixture_prediction ref=%s season=%s: %s", referee_id, season, e)
        raise HTTPException(status_code=500, detail="Internal error")

    p = result.prediction
    rec = result.recommendation
    return FixturePredictionResponse(
        referee_id=result.referee_id,
        home_team_id=result.home_team_id,
        away_team_id=result.away_team_id,
        season=result.season,
        league_api_id=result.league_api_id,
        expected_cards=result.expected_cards,
        threshold=result.threshold,
        p_over=result.p_over,
        p_under=result.p_under,
        lines=[LineItem(threshold=l.threshold, p_over=l.p_over, p_under=l.p_under) for l in p.lines],
        confidence=p.confidence,
        confidence_score=p.confidence_score,
        used_prior=p.used_prior,
        stats_coverage=round(result.stats_coverage, 4),
        signals=[
            ValueSignalItem(
                market=s.market,
                threshold=s.threshold,
                probability=s.probability,
                odds=s.odds,
                ev=s.ev,
                is_value=s.is_value,
            )
            for s in result.signals
        ],
        recommendation=RecommendationItem(
            primary_pick=rec.primary_pick,
            odds_range=rec.odds_range,
            confidence=rec.confidence,
            reasoning=rec.reasoning,
            alternative_picks=rec.alternative_picks,
            has_edge=rec.has_edge,
        ),
    )

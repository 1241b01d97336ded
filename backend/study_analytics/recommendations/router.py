import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from ..auth.deps import ActiveUserDep
from ..db import SessionDep
from ..exceptions import RecommendationNotFoundError
from .schemas import (
    ExpireResponse,
    GenerateRecommendationsResponse,
    PendingRecommendationsResponse,
    RecommendationDecision,
    RecommendationPublic,
    RecommendRequest,
)
from . import service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/adaptive-calendar/recommend", tags=["Recommendations"])


@router.post("", response_model=GenerateRecommendationsResponse)
def generate_recommendations(
    db: SessionDep,
    current_user: ActiveUserDep,
    request: Optional[RecommendRequest] = None,
):
    """
    Generate schedule recommendations for the target day from the user's
    historical performance.
    """
    request = request or RecommendRequest()
    try:
        recommendations = service.generate_schedule_recommendations(
            db,
            current_user.id,
            target_date=request.target_date,
            session_type=request.session_type,
        )
    except Exception as e:
        logger.exception("Error generating recommendations for user %d", current_user.id)
        raise HTTPException(
            status_code=500, detail=f"Failed to generate recommendations: {str(e)}"
        )
    return GenerateRecommendationsResponse(
        recommendations=[RecommendationPublic.model_validate(r) for r in recommendations]
    )


@router.get("", response_model=PendingRecommendationsResponse)
def get_pending_recommendations(db: SessionDep, current_user: ActiveUserDep):
    try:
        recommendations = service.pending_recommendations(db, current_user.id)
        stats = service.recommendation_stats(db, current_user.id)
    except Exception as e:
        logger.exception("Error fetching recommendations for user %d", current_user.id)
        raise HTTPException(
            status_code=500, detail=f"Failed to fetch recommendations: {str(e)}"
        )
    return PendingRecommendationsResponse(
        recommendations=[RecommendationPublic.model_validate(r) for r in recommendations],
        stats=stats,
    )


@router.post("/expire", response_model=ExpireResponse)
def expire_recommendations(db: SessionDep, current_user: ActiveUserDep):
    """Mark pending recommendations whose time has passed as expired"""
    return ExpireResponse(expired=service.expire_old_recommendations(db, current_user.id))


@router.get("/history", response_model=List[RecommendationPublic])
def get_recommendation_history(
    db: SessionDep,
    current_user: ActiveUserDep,
    limit: int = Query(50, ge=1, le=200),
):
    return service.recommendation_history(db, current_user.id, limit=limit)


@router.post("/{recommendation_id}/accept", response_model=RecommendationDecision)
def accept_recommendation(db: SessionDep, recommendation_id: int, current_user: ActiveUserDep):
    try:
        recommendation = service.accept_recommendation(db, current_user.id, recommendation_id)
    except RecommendationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return RecommendationDecision(
        recommendation=RecommendationPublic.model_validate(recommendation)
    )


@router.post("/{recommendation_id}/reject", response_model=RecommendationDecision)
def reject_recommendation(db: SessionDep, recommendation_id: int, current_user: ActiveUserDep):
    try:
        service.reject_recommendation(db, current_user.id, recommendation_id)
    except RecommendationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return RecommendationDecision()

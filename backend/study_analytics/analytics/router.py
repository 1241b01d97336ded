from fastapi import APIRouter, HTTPException
from typing import List, Optional

from ..db import SessionDep
from ..auth.deps import ActiveUserDep, OptionalUserDep
from ..exceptions import InvalidArgumentError, SessionNotFoundError
from .schemas import (
    DailyPerformance,
    EventImpact,
    HourlyPerformance,
    InsightSet,
    OptimalTimeSlot,
    SessionMetricsUpdate,
    SuccessResponse,
)
from .service import AnalyticsService

router = APIRouter(prefix="/adaptive-calendar", tags=["Adaptive Calendar"])


@router.post("/sessions/{session_id}/metrics", response_model=SuccessResponse)
def update_session_metrics(
    db: SessionDep,
    session_id: int,
    metrics: SessionMetricsUpdate,
    current_user: ActiveUserDep,
):
    """Attach performance metrics to a study session"""
    try:
        return AnalyticsService.update_session_metrics(
            db, current_user.id, session_id, **metrics.model_dump(exclude_unset=True)
        )
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidArgumentError as e:
        raise HTTPException(status_code=422, detail=str(e))


# The read endpoints answer unauthenticated callers with null rather than 401


@router.get("/hourly-performance", response_model=Optional[HourlyPerformance])
def get_hourly_performance(db: SessionDep, current_user: OptionalUserDep):
    if current_user is None:
        return None
    return AnalyticsService.hourly_performance(db, current_user.id)


@router.get("/daily-performance", response_model=Optional[DailyPerformance])
def get_daily_performance(db: SessionDep, current_user: OptionalUserDep):
    if current_user is None:
        return None
    return AnalyticsService.daily_performance(db, current_user.id)


@router.get("/event-impact", response_model=Optional[EventImpact])
def get_event_impact_analysis(db: SessionDep, current_user: OptionalUserDep):
    """Performance grouped by the preceding calendar event type"""
    if current_user is None:
        return None
    return AnalyticsService.event_impact_analysis(db, current_user.id)


@router.get("/optimal-times", response_model=Optional[List[OptimalTimeSlot]])
def get_optimal_study_times(db: SessionDep, current_user: OptionalUserDep):
    if current_user is None:
        return None
    return AnalyticsService.optimal_study_times(db, current_user.id)


@router.get("/insights", response_model=Optional[InsightSet])
def get_performance_insights(db: SessionDep, current_user: OptionalUserDep):
    if current_user is None:
        return None
    return AnalyticsService.performance_insights(db, current_user.id)

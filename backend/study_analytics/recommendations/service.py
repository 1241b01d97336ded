"""
Schedule recommendations built from the user's optimal study times.

Recommendations are persisted so the user can accept or reject them; the
acceptance statistics come from those decisions.
"""
import json
import logging
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from ..analytics.service import AnalyticsService
from ..exceptions import RecommendationNotFoundError
from ..utils import ensure_utc, round_half_up, to_local, utc_now
from .models import RecommendationStatus, ScheduleRecommendation
from .schemas import RecommendationStats

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TYPE = "Focus Session"
RECOMMENDED_DURATION = 25 * 60  # one pomodoro, in seconds
MAX_RECOMMENDATIONS = 3
DEFAULT_HOURS = [9, 14, 19]
DEFAULT_CONFIDENCE = 50
DEFAULT_REASON = (
    "Default recommendation based on common productivity patterns. "
    "Complete more sessions to get personalized recommendations."
)


def _target_day(target_date: Optional[datetime], now: datetime) -> datetime:
    """Local midnight of the target date."""
    day = to_local(target_date or now)
    return day.replace(hour=0, minute=0, second=0, microsecond=0)


def _reason(session_count: int, avg_productivity: int, hour: int) -> str:
    reason = f"Based on {session_count} previous sessions, "
    reason += f"you average {avg_productivity}% productivity at {hour}:00. "
    if avg_productivity >= 80:
        reason += "This is one of your peak performance times!"
    elif avg_productivity >= 60:
        reason += "You typically perform well during this hour."
    return reason


def create_recommendation(
    db: Session,
    user_id: int,
    recommended_time: datetime,
    session_type: str,
    confidence: int,
    reason: str,
    based_on_metrics: dict,
    duration: int = RECOMMENDED_DURATION,
    commit: bool = True,
) -> ScheduleRecommendation:
    now = utc_now()
    recommendation = ScheduleRecommendation(
        user_id=user_id,
        recommended_time=ensure_utc(recommended_time),
        duration=duration,
        session_type=session_type,
        confidence=confidence,
        reason=reason,
        based_on_metrics=json.dumps(based_on_metrics),
        status=RecommendationStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    db.add(recommendation)
    if commit:
        db.commit()
        db.refresh(recommendation)
    return recommendation


def create_default_recommendations(
    db: Session,
    user_id: int,
    target_date: Optional[datetime] = None,
    session_type: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[ScheduleRecommendation]:
    """Fixed morning / afternoon / evening slots for users without history."""
    now = ensure_utc(now) if now else utc_now()
    day = _target_day(target_date, now)

    created = []
    for hour in DEFAULT_HOURS:
        recommended_time = day.replace(hour=hour)
        if recommended_time < now:
            continue
        created.append(
            create_recommendation(
                db,
                user_id,
                recommended_time,
                session_type or DEFAULT_SESSION_TYPE,
                DEFAULT_CONFIDENCE,
                DEFAULT_REASON,
                {"type": "default", "hour": hour},
                commit=False,
            )
        )

    db.commit()
    for recommendation in created:
        db.refresh(recommendation)
    logger.info("Created %d default recommendations for user %d", len(created), user_id)
    return created


def generate_schedule_recommendations(
    db: Session,
    user_id: int,
    target_date: Optional[datetime] = None,
    session_type: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[ScheduleRecommendation]:
    """
    Recommend up to three study slots on the target day at the user's best
    hours. Slots already in the past are skipped.
    """
    now = ensure_utc(now) if now else utc_now()
    optimal_times = [
        slot for slot in AnalyticsService.optimal_study_times(db, user_id) if slot.session_count > 0
    ]

    if not optimal_times:
        return create_default_recommendations(db, user_id, target_date, session_type, now)

    day = _target_day(target_date, now)
    created = []
    for slot in optimal_times[:MAX_RECOMMENDATIONS]:
        recommended_time = day.replace(hour=slot.hour)
        if recommended_time < now:
            continue

        confidence = min(100, slot.score + slot.session_count * 2)
        created.append(
            create_recommendation(
                db,
                user_id,
                recommended_time,
                session_type or DEFAULT_SESSION_TYPE,
                confidence,
                _reason(slot.session_count, slot.avg_productivity, slot.hour),
                {
                    "hourly_productivity": slot.avg_productivity,
                    "sample_size": slot.session_count,
                    "hour": slot.hour,
                },
                commit=False,
            )
        )

    db.commit()
    for recommendation in created:
        db.refresh(recommendation)
    logger.info("Generated %d schedule recommendations for user %d", len(created), user_id)
    return created


def pending_recommendations(
    db: Session, user_id: int, now: Optional[datetime] = None, limit: int = 10
) -> List[ScheduleRecommendation]:
    now = ensure_utc(now) if now else utc_now()
    return db.exec(
        select(ScheduleRecommendation)
        .where(ScheduleRecommendation.user_id == user_id)
        .where(ScheduleRecommendation.status == RecommendationStatus.PENDING)
        .where(ScheduleRecommendation.recommended_time >= now)
        .order_by(ScheduleRecommendation.created_at.desc(), ScheduleRecommendation.id.desc())
        .limit(limit)
    ).all()


def _owned_recommendation(db: Session, user_id: int, recommendation_id: int) -> ScheduleRecommendation:
    recommendation = db.get(ScheduleRecommendation, recommendation_id)
    if not recommendation or recommendation.user_id != user_id:
        raise RecommendationNotFoundError()
    return recommendation


def _set_status(
    db: Session, user_id: int, recommendation_id: int, status: RecommendationStatus
) -> ScheduleRecommendation:
    recommendation = _owned_recommendation(db, user_id, recommendation_id)
    recommendation.status = status
    recommendation.updated_at = utc_now()
    db.add(recommendation)
    db.commit()
    db.refresh(recommendation)
    logger.info("Recommendation %d %s by user %d", recommendation_id, status.value, user_id)
    return recommendation


def accept_recommendation(db: Session, user_id: int, recommendation_id: int) -> ScheduleRecommendation:
    return _set_status(db, user_id, recommendation_id, RecommendationStatus.ACCEPTED)


def reject_recommendation(db: Session, user_id: int, recommendation_id: int) -> ScheduleRecommendation:
    return _set_status(db, user_id, recommendation_id, RecommendationStatus.REJECTED)


def expire_old_recommendations(db: Session, user_id: int, now: Optional[datetime] = None) -> int:
    now = ensure_utc(now) if now else utc_now()
    stale = db.exec(
        select(ScheduleRecommendation)
        .where(ScheduleRecommendation.user_id == user_id)
        .where(ScheduleRecommendation.status == RecommendationStatus.PENDING)
        .where(ScheduleRecommendation.recommended_time < now)
    ).all()

    for recommendation in stale:
        recommendation.status = RecommendationStatus.EXPIRED
        recommendation.updated_at = now
        db.add(recommendation)
    db.commit()
    if stale:
        logger.info("Expired %d recommendations for user %d", len(stale), user_id)
    return len(stale)


def recommendation_history(db: Session, user_id: int, limit: int = 50) -> List[ScheduleRecommendation]:
    return db.exec(
        select(ScheduleRecommendation)
        .where(ScheduleRecommendation.user_id == user_id)
        .order_by(ScheduleRecommendation.created_at.desc(), ScheduleRecommendation.id.desc())
        .limit(limit)
    ).all()


def recommendation_stats(db: Session, user_id: int) -> RecommendationStats:
    recommendations = db.exec(
        select(ScheduleRecommendation).where(ScheduleRecommendation.user_id == user_id)
    ).all()

    counts = {status: 0 for status in RecommendationStatus}
    for recommendation in recommendations:
        counts[recommendation.status] += 1

    accepted = counts[RecommendationStatus.ACCEPTED]
    rejected = counts[RecommendationStatus.REJECTED]
    decided = accepted + rejected
    acceptance_rate = round_half_up(accepted / decided * 100) if decided else 0

    return RecommendationStats(
        total=len(recommendations),
        accepted=accepted,
        rejected=rejected,
        expired=counts[RecommendationStatus.EXPIRED],
        pending=counts[RecommendationStatus.PENDING],
        acceptance_rate=acceptance_rate,
    )

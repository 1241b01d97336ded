"""
Recording study sessions, the user's study settings and the basic per-user
session views.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlmodel import Session, select

from ..analytics.scoring import focus_quality, productivity_score
from ..analytics.service import AnalyticsService
from ..config import settings
from ..models import StudySession
from ..utils import ensure_utc, hour_and_day, utc_now
from .models import StudySettings
from .schemas import SessionComplete, SessionStats, StudySettingsPublic, StudySettingsUpdate

logger = logging.getLogger(__name__)


def _settings_row(db: Session, user_id: int) -> Optional[StudySettings]:
    return db.exec(select(StudySettings).where(StudySettings.user_id == user_id)).first()


def get_study_settings(db: Session, user_id: int) -> StudySettingsPublic:
    """The user's saved settings, or the configured defaults when none are saved."""
    row = _settings_row(db, user_id)
    if row is None:
        return StudySettingsPublic(
            study_duration=settings.default_study_duration,
            daily_goal=settings.default_daily_goal,
            total_study_time=0,
        )
    return StudySettingsPublic(
        study_duration=row.study_duration,
        daily_goal=row.daily_goal,
        total_study_time=row.total_study_time,
    )


def ensure_study_settings(db: Session, user_id: int) -> StudySettings:
    """Return the user's settings row, creating it with defaults. Does not commit."""
    row = _settings_row(db, user_id)
    if row is None:
        row = StudySettings(
            user_id=user_id,
            study_duration=settings.default_study_duration,
            daily_goal=settings.default_daily_goal,
            total_study_time=0,
            last_updated=utc_now(),
        )
        db.add(row)
    return row


def update_study_settings(db: Session, user_id: int, data: StudySettingsUpdate) -> StudySettingsPublic:
    row = ensure_study_settings(db, user_id)
    row.study_duration = data.study_duration
    row.daily_goal = data.daily_goal
    row.last_updated = utc_now()
    db.add(row)
    db.commit()
    logger.info("Updated study settings for user %d", user_id)
    return get_study_settings(db, user_id)


def record_session(
    db: Session, user_id: int, data: SessionComplete, now: Optional[datetime] = None
) -> StudySession:
    """
    Store a finished study interval ending at `now`.

    Completed sessions are scored right away against the planned duration,
    or the user's study duration setting when none is given, and count
    toward the user's total study time. The hour of day and day of week are
    always filled in from the start time.
    """
    now = ensure_utc(now) if now else utc_now()
    start_time = now - timedelta(seconds=data.duration)
    hour, day = hour_and_day(start_time)

    session = StudySession(
        user_id=user_id,
        start_time=start_time,
        end_time=now,
        duration=data.duration,
        type=data.type,
        completed=data.completed,
        energy_level=data.energy_level,
        hour_of_day=hour,
        day_of_week=day,
        breaks_taken=data.breaks_taken,
        break_duration=data.break_duration,
        preceding_event_type=data.preceding_event_type,
        following_event_type=data.following_event_type,
        google_calendar_event_id=data.google_calendar_event_id,
        synced_to_calendar=data.synced_to_calendar,
    )

    if data.completed:
        study_settings = ensure_study_settings(db, user_id)
        study_settings.total_study_time += data.duration
        study_settings.last_updated = now
        db.add(study_settings)

        planned = data.planned_duration
        if planned is None:
            planned = study_settings.study_duration
        session.productivity_score = productivity_score(
            True, data.duration, planned, data.breaks_taken, data.break_duration
        )
        session.focus_quality = focus_quality(
            data.duration, data.breaks_taken, data.break_duration
        )

    db.add(session)
    AnalyticsService.invalidate_cache(db, user_id, commit=False)
    db.commit()
    db.refresh(session)
    logger.info(
        "Recorded %s session %d for user %d (%ds)",
        "completed" if session.completed else "incomplete",
        session.id,
        user_id,
        session.duration,
    )
    return session


def recent_sessions(db: Session, user_id: int, limit: int = 10) -> List[StudySession]:
    return db.exec(
        select(StudySession)
        .where(StudySession.user_id == user_id)
        .order_by(StudySession.start_time.desc(), StudySession.id.desc())
        .limit(limit)
    ).all()


def session_stats(
    db: Session, user_id: int, days: int = 7, now: Optional[datetime] = None
) -> SessionStats:
    cutoff = (ensure_utc(now) if now else utc_now()) - timedelta(days=days)
    sessions = db.exec(
        select(StudySession)
        .where(StudySession.user_id == user_id)
        .where(StudySession.start_time > cutoff)
    ).all()

    total = len(sessions)
    completed = len([s for s in sessions if s.completed])
    rate = round(completed / total * 100, 1) if total else 0.0
    study_settings = get_study_settings(db, user_id)
    return SessionStats(
        total_sessions=total,
        completed_sessions=completed,
        completion_rate=rate,
        total_study_time=study_settings.total_study_time,
        study_duration=study_settings.study_duration,
        daily_goal=study_settings.daily_goal,
    )

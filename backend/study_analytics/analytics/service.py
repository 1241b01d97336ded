import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional

from pydantic import TypeAdapter
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..config import settings
from ..exceptions import InvalidArgumentError, SessionNotFoundError
from ..models import EnergyLevel, StudySession
from ..utils import ensure_utc, hour_and_day, round_half_up, utc_now
from .models import AnalyticsType, PerformanceAnalytics
from .schemas import (
    DailyBucket,
    DailyPerformance,
    EventImpact,
    EventImpactBucket,
    HourlyBucket,
    HourlyPerformance,
    InsightSet,
    OptimalTimeSlot,
)

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# Sessions needed before an hour's productivity is trusted in full
CONFIDENCE_SESSIONS = 10
OPTIMAL_TIMES_LIMIT = 5

INSIGHT_SAMPLE_SIZE = 100
MIN_SESSIONS_FOR_INSIGHTS = 5
CONSISTENCY_WINDOW = 10
COLD_START_MESSAGE = "Complete more study sessions to get personalized insights!"

METRIC_FIELDS = ("productivity_score", "focus_quality", "energy_level", "breaks_taken", "break_duration")

_CACHE_ADAPTERS: Dict[AnalyticsType, TypeAdapter] = {
    AnalyticsType.HOURLY_PERFORMANCE: TypeAdapter(HourlyPerformance),
    AnalyticsType.DAILY_PERFORMANCE: TypeAdapter(DailyPerformance),
    AnalyticsType.EVENT_IMPACT: TypeAdapter(EventImpact),
    AnalyticsType.OPTIMAL_TIMES: TypeAdapter(List[OptimalTimeSlot]),
}


@dataclass
class _Accumulator:
    count: int = 0
    productivity: float = 0
    focus: float = 0
    duration: int = 0

    def add(self, session: StudySession) -> None:
        self.count += 1
        self.productivity += session.productivity_score or 0
        self.focus += session.focus_quality or 0
        self.duration += session.duration

    @property
    def avg_productivity(self) -> float:
        return self.productivity / self.count if self.count else 0

    @property
    def avg_focus(self) -> float:
        return self.focus / self.count if self.count else 0


def reduce_sessions(
    sessions: Iterable[StudySession], key: Callable[[StudySession], Optional[Hashable]]
) -> Dict[Hashable, _Accumulator]:
    """Group sessions by `key` and sum their metrics. A key of None skips the session."""
    totals: Dict[Hashable, _Accumulator] = {}
    for session in sessions:
        bucket_key = key(session)
        if bucket_key is None:
            continue
        totals.setdefault(bucket_key, _Accumulator()).add(session)
    return totals


def session_hour(session: StudySession) -> Optional[int]:
    hour = session.hour_of_day
    if hour is None:
        hour = hour_and_day(session.start_time)[0]
    return hour if 0 <= hour < 24 else None


def session_day(session: StudySession) -> Optional[int]:
    day = session.day_of_week
    if day is None:
        day = hour_and_day(session.start_time)[1]
    return day if 0 <= day < 7 else None


def _validate_metrics(metrics: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(metrics) - set(METRIC_FIELDS)
    if unknown:
        raise InvalidArgumentError(f"Unknown metric fields: {', '.join(sorted(unknown))}")

    for name in ("productivity_score", "focus_quality"):
        value = metrics.get(name)
        if value is not None and not 0 <= value <= 100:
            raise InvalidArgumentError(f"{name} must be between 0 and 100")

    for name in ("breaks_taken", "break_duration"):
        value = metrics.get(name)
        if value is not None and value < 0:
            raise InvalidArgumentError(f"{name} must not be negative")

    cleaned = dict(metrics)
    energy = cleaned.get("energy_level")
    if energy is not None:
        try:
            cleaned["energy_level"] = EnergyLevel(energy)
        except ValueError:
            raise InvalidArgumentError(f"Invalid energy level: {energy}")
    return cleaned


class AnalyticsService:
    """Performance analytics over a user's study sessions"""

    @staticmethod
    def completed_sessions(db: Session, user_id: int) -> List[StudySession]:
        return db.exec(
            select(StudySession)
            .where(StudySession.user_id == user_id)
            .where(StudySession.completed == True)  # noqa: E712
        ).all()

    @staticmethod
    def update_session_metrics(db: Session, user_id: int, session_id: int, **metrics) -> Dict[str, bool]:
        """
        Attach performance metrics to a session owned by the user.

        Hour of day and day of week are always recomputed from the session's
        start time. Only the metric fields passed in are written.
        """
        metrics = _validate_metrics(metrics)

        session = db.get(StudySession, session_id)
        if not session or session.user_id != user_id:
            raise SessionNotFoundError()

        session.hour_of_day, session.day_of_week = hour_and_day(session.start_time)
        for name, value in metrics.items():
            setattr(session, name, value)

        db.add(session)
        AnalyticsService.invalidate_cache(db, user_id, commit=False)
        db.commit()
        logger.info("Updated metrics for session %d (user %d)", session_id, user_id)
        return {"success": True}

    # Aggregations

    @staticmethod
    def hourly_performance(db: Session, user_id: int) -> HourlyPerformance:
        def compute() -> HourlyPerformance:
            totals = reduce_sessions(AnalyticsService.completed_sessions(db, user_id), session_hour)
            hourly = {}
            for hour in range(24):
                acc = totals.get(hour, _Accumulator())
                hourly[hour] = HourlyBucket(
                    total_sessions=acc.count,
                    avg_productivity=round_half_up(acc.avg_productivity),
                    avg_focus_quality=round_half_up(acc.avg_focus),
                    total_duration=acc.duration,
                )
            return hourly

        return AnalyticsService._cached(db, user_id, AnalyticsType.HOURLY_PERFORMANCE, compute)

    @staticmethod
    def daily_performance(db: Session, user_id: int) -> DailyPerformance:
        def compute() -> DailyPerformance:
            totals = reduce_sessions(AnalyticsService.completed_sessions(db, user_id), session_day)
            daily = {}
            for day, day_name in enumerate(DAY_NAMES):
                acc = totals.get(day, _Accumulator())
                daily[day] = DailyBucket(
                    total_sessions=acc.count,
                    avg_productivity=round_half_up(acc.avg_productivity),
                    avg_focus_quality=round_half_up(acc.avg_focus),
                    total_duration=acc.duration,
                    day_name=day_name,
                )
            return daily

        return AnalyticsService._cached(db, user_id, AnalyticsType.DAILY_PERFORMANCE, compute)

    @staticmethod
    def event_impact_analysis(db: Session, user_id: int) -> EventImpact:
        """Performance grouped by the type of calendar event preceding each session."""
        def compute() -> EventImpact:
            totals = reduce_sessions(
                AnalyticsService.completed_sessions(db, user_id),
                lambda s: s.preceding_event_type or None,
            )
            return {
                event_type: EventImpactBucket(
                    count=acc.count,
                    avg_productivity=round_half_up(acc.avg_productivity),
                    avg_focus_quality=round_half_up(acc.avg_focus),
                )
                for event_type, acc in totals.items()
            }

        return AnalyticsService._cached(db, user_id, AnalyticsType.EVENT_IMPACT, compute)

    # Recommendations

    @staticmethod
    def optimal_study_times(db: Session, user_id: int) -> List[OptimalTimeSlot]:
        """
        Rank hours of the day by average productivity discounted by sample size.

        An hour backed by fewer than CONFIDENCE_SESSIONS sessions has its
        average scaled down linearly. Ties go to the earlier hour.
        """
        def compute() -> List[OptimalTimeSlot]:
            totals = reduce_sessions(AnalyticsService.completed_sessions(db, user_id), session_hour)
            ranked = []
            for hour in range(24):
                acc = totals.get(hour, _Accumulator())
                avg = acc.avg_productivity
                score = avg * min(1, acc.count / CONFIDENCE_SESSIONS)
                ranked.append((score, hour, acc.count, avg))

            ranked.sort(key=lambda entry: (-entry[0], entry[1]))
            return [
                OptimalTimeSlot(
                    hour=hour,
                    score=round_half_up(score),
                    session_count=count,
                    avg_productivity=round_half_up(avg),
                )
                for score, hour, count, avg in ranked[:OPTIMAL_TIMES_LIMIT]
            ]

        return AnalyticsService._cached(db, user_id, AnalyticsType.OPTIMAL_TIMES, compute)

    @staticmethod
    def performance_insights(db: Session, user_id: int) -> InsightSet:
        sessions = db.exec(
            select(StudySession)
            .where(StudySession.user_id == user_id)
            .where(StudySession.completed == True)  # noqa: E712
            .order_by(StudySession.start_time.desc(), StudySession.id.desc())
            .limit(INSIGHT_SAMPLE_SIZE)
        ).all()

        if len(sessions) < MIN_SESSIONS_FOR_INSIGHTS:
            return InsightSet(insights=[COLD_START_MESSAGE], recommendations=[])

        insights: List[str] = []
        recommendations: List[str] = []

        # Sessions without an hour fall back to a different default per bucket
        morning = [s for s in sessions if _hour_or(s, 0) < 12]
        afternoon = [s for s in sessions if 12 <= _hour_or(s, 12) < 18]

        if morning and afternoon:
            morning_avg = _mean_productivity(morning)
            afternoon_avg = _mean_productivity(afternoon)

            if abs(morning_avg - afternoon_avg) > 15:
                if morning_avg > afternoon_avg:
                    insights.append(_improvement_insight(morning_avg, afternoon_avg, "morning"))
                    recommendations.append("Schedule your most important study sessions before noon")
                else:
                    insights.append(_improvement_insight(afternoon_avg, morning_avg, "afternoon"))
                    recommendations.append("Schedule your most important study sessions after lunch")

        avg_breaks = sum(s.breaks_taken or 0 for s in sessions) / len(sessions)
        if avg_breaks < 1 and sessions[0].duration > 30 * 60:
            recommendations.append(
                "Try taking regular breaks using the Pomodoro technique to improve focus"
            )

        recent = sessions[:CONSISTENCY_WINDOW]
        consistency = len([s for s in recent if (s.productivity_score or 0) > 70]) / len(recent)
        if consistency > 0.7:
            insights.append("Great consistency! You're maintaining high productivity across sessions")

        return InsightSet(insights=insights, recommendations=recommendations)

    # Cache

    @staticmethod
    def invalidate_cache(db: Session, user_id: int, commit: bool = True) -> int:
        rows = db.exec(
            select(PerformanceAnalytics).where(PerformanceAnalytics.user_id == user_id)
        ).all()
        for row in rows:
            db.delete(row)
        if commit:
            db.commit()
        if rows:
            logger.info("Invalidated %d cached analytics for user %d", len(rows), user_id)
        return len(rows)

    @staticmethod
    def _cached(db: Session, user_id: int, analytics_type: AnalyticsType, compute: Callable[[], Any]):
        ttl = settings.analytics_cache_ttl_seconds
        if ttl <= 0:
            return compute()

        adapter = _CACHE_ADAPTERS[analytics_type]
        now = utc_now()
        entry = db.exec(
            select(PerformanceAnalytics)
            .where(PerformanceAnalytics.user_id == user_id)
            .where(PerformanceAnalytics.analytics_type == analytics_type)
        ).first()

        if entry and ensure_utc(entry.valid_until) > now:
            logger.debug("Analytics cache hit: %s for user %d", analytics_type.value, user_id)
            return adapter.validate_json(entry.data)

        logger.debug("Analytics cache miss: %s for user %d", analytics_type.value, user_id)
        result = compute()
        data = adapter.dump_json(result).decode()
        if entry is None:
            entry = PerformanceAnalytics(
                user_id=user_id,
                analytics_type=analytics_type,
                data=data,
                last_calculated=now,
                valid_until=now + timedelta(seconds=ttl),
            )
        else:
            entry.data = data
            entry.last_calculated = now
            entry.valid_until = now + timedelta(seconds=ttl)
        db.add(entry)
        try:
            db.commit()
        except IntegrityError:
            # Another request stored this view first; its row is kept
            db.rollback()
            logger.debug("Analytics cache row already stored: %s for user %d", analytics_type.value, user_id)
        return result


def _hour_or(session: StudySession, default: int) -> int:
    return session.hour_of_day if session.hour_of_day is not None else default


def _mean_productivity(sessions: List[StudySession]) -> float:
    return sum(s.productivity_score or 0 for s in sessions) / len(sessions)


def _improvement_insight(stronger: float, weaker: float, period: str) -> str:
    if weaker == 0:
        return f"You're significantly more productive in the {period}"
    percent = round_half_up((stronger - weaker) / weaker * 100)
    return f"You're {percent}% more productive in the {period}"

from typing import Optional
from datetime import datetime, timezone
from enum import Enum

from sqlmodel import Field as SQLField, SQLModel


class RecommendationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class ScheduleRecommendation(SQLModel, table=True):
    """A suggested study slot and the user's decision on it"""
    __tablename__ = "schedule_recommendation"

    id: Optional[int] = SQLField(default=None, primary_key=True)
    user_id: int = SQLField(foreign_key="user.id", index=True)
    recommended_time: datetime = SQLField(index=True)  # suggested session start
    duration: int  # in seconds
    session_type: str
    confidence: int  # 0-100
    reason: str
    based_on_metrics: str  # JSON string of the metrics used
    status: RecommendationStatus = SQLField(default=RecommendationStatus.PENDING, index=True)
    calendar_event_id: Optional[str] = None  # set if accepted and synced
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))

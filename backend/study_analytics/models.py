from typing import Optional
from datetime import datetime
from enum import Enum

from sqlmodel import Field as SQLField, SQLModel


class EnergyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StudySession(SQLModel, table=True):
    """One completed or attempted study interval."""
    __tablename__ = "study_session"

    id: Optional[int] = SQLField(default=None, primary_key=True)
    user_id: int = SQLField(foreign_key="user.id", index=True)
    start_time: datetime = SQLField(index=True)
    end_time: Optional[datetime] = None
    duration: int  # in seconds
    type: str
    completed: bool = SQLField(default=False, index=True)

    # Performance metrics for adaptive scheduling
    productivity_score: Optional[float] = None  # 0-100
    focus_quality: Optional[float] = None  # 0-100
    energy_level: Optional[EnergyLevel] = None

    # Denormalized from start_time for bucketing
    hour_of_day: Optional[int] = SQLField(default=None, index=True)  # 0-23
    day_of_week: Optional[int] = None  # 0-6, Sunday = 0

    breaks_taken: Optional[int] = None
    break_duration: Optional[int] = None  # in seconds

    google_calendar_event_id: Optional[str] = None
    synced_to_calendar: Optional[bool] = None

    # Calendar context around the session
    preceding_event_type: Optional[str] = None
    following_event_type: Optional[str] = None

from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime

from ..models import EnergyLevel


class SessionComplete(BaseModel):
    duration: int = Field(ge=0)  # in seconds
    type: str
    completed: bool
    # Falls back to the user's study duration setting
    planned_duration: Optional[int] = Field(default=None, ge=0)
    breaks_taken: int = Field(default=0, ge=0)
    break_duration: int = Field(default=0, ge=0)
    energy_level: Optional[EnergyLevel] = None
    preceding_event_type: Optional[str] = None
    following_event_type: Optional[str] = None
    google_calendar_event_id: Optional[str] = None
    synced_to_calendar: Optional[bool] = None


class StudySessionPublic(BaseModel):
    id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: int
    type: str
    completed: bool
    productivity_score: Optional[float] = None
    focus_quality: Optional[float] = None
    energy_level: Optional[EnergyLevel] = None
    hour_of_day: Optional[int] = None
    day_of_week: Optional[int] = None
    breaks_taken: Optional[int] = None
    break_duration: Optional[int] = None
    preceding_event_type: Optional[str] = None
    following_event_type: Optional[str] = None


class StudySettingsUpdate(BaseModel):
    study_duration: int = Field(gt=0)  # in seconds
    daily_goal: int = Field(ge=0)  # in seconds


class StudySettingsPublic(BaseModel):
    study_duration: int
    daily_goal: int
    total_study_time: int


class SessionStats(BaseModel):
    total_sessions: int
    completed_sessions: int
    completion_rate: float  # percentage
    total_study_time: int
    study_duration: int
    daily_goal: int

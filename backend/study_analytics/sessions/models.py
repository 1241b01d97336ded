from typing import Optional
from datetime import datetime, timezone

from sqlmodel import Field as SQLField, SQLModel


class StudySettings(SQLModel, table=True):
    """Per-user study preferences and running study total"""
    __tablename__ = "study_settings"

    id: Optional[int] = SQLField(default=None, primary_key=True)
    user_id: int = SQLField(foreign_key="user.id", unique=True, index=True)
    study_duration: int  # planned session length, in seconds
    daily_goal: int  # in seconds
    total_study_time: int = 0  # completed study time, in seconds
    last_updated: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))

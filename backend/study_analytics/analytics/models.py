from typing import Optional
from datetime import datetime
from enum import Enum

from sqlalchemy import UniqueConstraint
from sqlmodel import Field as SQLField, SQLModel


class AnalyticsType(str, Enum):
    HOURLY_PERFORMANCE = "hourly_performance"
    DAILY_PERFORMANCE = "daily_performance"
    EVENT_IMPACT = "event_impact"
    OPTIMAL_TIMES = "optimal_times"


class PerformanceAnalytics(SQLModel, table=True):
    """Cached analytics results per user, dropped whenever the user's sessions change"""
    __tablename__ = "performance_analytics"
    __table_args__ = (UniqueConstraint("user_id", "analytics_type"),)

    id: Optional[int] = SQLField(default=None, primary_key=True)
    user_id: int = SQLField(foreign_key="user.id", index=True)
    analytics_type: AnalyticsType = SQLField(index=True)
    data: str  # JSON string of analytics data
    last_calculated: datetime
    valid_until: datetime = SQLField(index=True)

from pydantic import BaseModel, Field
from typing import Optional, List, Dict

from ..models import EnergyLevel


class SessionMetricsUpdate(BaseModel):
    productivity_score: Optional[float] = Field(default=None, ge=0, le=100)
    focus_quality: Optional[float] = Field(default=None, ge=0, le=100)
    energy_level: Optional[EnergyLevel] = None
    breaks_taken: Optional[int] = Field(default=None, ge=0)
    break_duration: Optional[int] = Field(default=None, ge=0)


class SuccessResponse(BaseModel):
    success: bool = True


class HourlyBucket(BaseModel):
    total_sessions: int = 0
    avg_productivity: int = 0
    avg_focus_quality: int = 0
    total_duration: int = 0


class DailyBucket(HourlyBucket):
    day_name: str


class EventImpactBucket(BaseModel):
    count: int = 0
    avg_productivity: int = 0
    avg_focus_quality: int = 0


class OptimalTimeSlot(BaseModel):
    hour: int
    score: int
    session_count: int
    avg_productivity: int


class InsightSet(BaseModel):
    """Insights and recommendations derived from recent sessions"""
    insights: List[str]
    recommendations: List[str]


HourlyPerformance = Dict[int, HourlyBucket]
DailyPerformance = Dict[int, DailyBucket]
EventImpact = Dict[str, EventImpactBucket]

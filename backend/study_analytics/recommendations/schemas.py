from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .models import RecommendationStatus


class RecommendRequest(BaseModel):
    target_date: Optional[datetime] = Field(
        default=None, description="Day to plan for; defaults to today"
    )
    session_type: Optional[str] = Field(default=None, examples=["Focus Session"])


class RecommendationPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    recommended_time: datetime
    duration: int
    session_type: str
    confidence: int
    reason: str
    based_on_metrics: str
    status: RecommendationStatus
    calendar_event_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RecommendationStats(BaseModel):
    total: int
    accepted: int
    rejected: int
    expired: int
    pending: int
    acceptance_rate: int  # percentage of decided recommendations that were accepted


class GenerateRecommendationsResponse(BaseModel):
    success: bool = True
    recommendations: List[RecommendationPublic]


class PendingRecommendationsResponse(BaseModel):
    success: bool = True
    recommendations: List[RecommendationPublic]
    stats: RecommendationStats


class RecommendationDecision(BaseModel):
    success: bool = True
    recommendation: Optional[RecommendationPublic] = None


class ExpireResponse(BaseModel):
    expired: int

from fastapi import APIRouter, Query
from typing import List

from ..db import SessionDep
from ..auth.deps import ActiveUserDep
from .schemas import (
    SessionComplete,
    SessionStats,
    StudySessionPublic,
    StudySettingsPublic,
    StudySettingsUpdate,
)
from . import service

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.post("/complete", response_model=StudySessionPublic)
def complete_session(
    db: SessionDep,
    session_data: SessionComplete,
    current_user: ActiveUserDep,
):
    """Record a finished study session and score it"""
    return service.record_session(db, current_user.id, session_data)


@router.get("/recent", response_model=List[StudySessionPublic])
def read_recent_sessions(
    db: SessionDep,
    current_user: ActiveUserDep,
    limit: int = Query(10, ge=1, le=100),
):
    return service.recent_sessions(db, current_user.id, limit=limit)


@router.get("/stats", response_model=SessionStats)
def read_session_stats(
    db: SessionDep,
    current_user: ActiveUserDep,
    days: int = Query(7, ge=1, le=90),
):
    return service.session_stats(db, current_user.id, days=days)


@router.get("/settings", response_model=StudySettingsPublic)
def read_study_settings(db: SessionDep, current_user: ActiveUserDep):
    return service.get_study_settings(db, current_user.id)


@router.put("/settings", response_model=StudySettingsPublic)
def update_study_settings(
    db: SessionDep,
    settings_data: StudySettingsUpdate,
    current_user: ActiveUserDep,
):
    """Save the user's planned session length and daily goal"""
    return service.update_study_settings(db, current_user.id, settings_data)

"""
Shared fixtures for the test suites: an in-memory database and helpers to
seed users and study sessions.
"""
import os
import sys
from datetime import datetime, timedelta, timezone

# Set required environment variables before the package reads its settings
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ.setdefault('TIMEZONE', 'UTC')

# Add the backend directory to the Python path
backend_path = os.path.join(os.path.dirname(__file__), '..', 'backend')
sys.path.insert(0, os.path.abspath(backend_path))

from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel, Session, create_engine  # noqa: E402

import study_analytics.db  # noqa: E402,F401  registers every table
from study_analytics.models import StudySession  # noqa: E402
from study_analytics.users.models import User  # noqa: E402

# Monday 5 January 2026, midnight UTC
MONDAY = datetime(2026, 1, 5, tzinfo=timezone.utc)


def make_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


def make_user(db: Session, email: str = 'student@example.com') -> User:
    user = User(name='Test Student', email=email, password='not-a-real-hash')
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_session(
    db: Session,
    user_id: int,
    hour=9,
    productivity=None,
    focus=None,
    completed=True,
    duration=1500,
    start_time=None,
    breaks_taken=None,
    preceding_event_type=None,
    set_hour=True,
) -> StudySession:
    """Insert a session directly, bypassing scoring and cache invalidation."""
    if start_time is None:
        start_time = MONDAY + timedelta(hours=hour if hour is not None else 0)
    session = StudySession(
        user_id=user_id,
        start_time=start_time,
        end_time=start_time + timedelta(seconds=duration),
        duration=duration,
        type='Focus Session',
        completed=completed,
        productivity_score=productivity,
        focus_quality=focus,
        hour_of_day=hour if set_hour else None,
        breaks_taken=breaks_taken,
        preceding_event_type=preceding_event_type,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session

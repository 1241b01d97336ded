import logging
from typing import Annotated

from fastapi import Depends
from sqlmodel import SQLModel, create_engine, Session

from study_analytics.config import settings
# Import table models so they're registered on the metadata
from study_analytics.users.models import User  # noqa: F401
from study_analytics.models import StudySession  # noqa: F401
from study_analytics.analytics.models import PerformanceAnalytics  # noqa: F401
from study_analytics.recommendations.models import ScheduleRecommendation  # noqa: F401
from study_analytics.sessions.models import StudySettings  # noqa: F401

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url

connect_args = {}

if DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    DATABASE_URL, echo=settings.database_echo, connect_args=connect_args
)


def get_session():
    with Session(engine) as session:
        yield session


def create_db_and_tables():
    logger.info("Creating database tables on %s", DATABASE_URL)
    SQLModel.metadata.create_all(engine)


SessionDep = Annotated[Session, Depends(get_session)]

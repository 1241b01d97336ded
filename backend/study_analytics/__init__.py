import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import settings
from .db import create_db_and_tables
from .exceptions import NotAuthenticatedError
from .auth.router import router as auth_router
from .sessions.router import router as sessions_router
from .analytics.router import router as analytics_router
from .recommendations.router import router as recommendations_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Application startup (%s)", settings.environment)
    create_db_and_tables()
    yield
    logger.info("Application shutdown.")


app = FastAPI(
    title="Study Analytics API",
    description="Study session performance analytics and adaptive schedule recommendations.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    return JSONResponse(
        status_code=401,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


app.include_router(auth_router)
app.include_router(sessions_router)
app.include_router(analytics_router)
app.include_router(recommendations_router)

"""FastAPI application factory.

Main entry point for the EduProgress Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eduprogress import __version__
from eduprogress.config.achievements import load_achievement_definitions
from eduprogress.config.app_config import AppConfig, load_app_config
from eduprogress.config.logging_setup import configure_logging
from eduprogress.core.errors import ProgressError
from eduprogress.db import AchievementRepository, Database
from eduprogress.utils.dates import Clock, utc_today
from eduprogress.web.routes import dashboard_router, exams_router, health_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    logger.info(
        "api_startup",
        database=str(app.state.database.path),
        single_open_attempt=app.state.config.exams.single_open_attempt,
    )
    yield


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ProgressError)
    async def handle_progress_error(request: Request, exc: ProgressError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request_failed", path=request.url.path, error=exc.message)
            detail = "Internal server error"
        else:
            detail = exc.message
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"loc": list(e.get("loc", [])), "msg": e.get("msg", "")} for e in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid request", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


def create_app(
    config: AppConfig | None = None,
    database: Database | None = None,
    today: Clock = utc_today,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The database schema and achievement definitions are initialized here,
    so the app is usable as soon as it is built.

    Args:
        config: Application config; loaded from file when omitted
        database: Store to use; built from ``config.database.path`` when omitted
        today: Calendar used for streaks and weekly activity

    Returns:
        Configured FastAPI app instance
    """
    config = config or load_app_config()
    configure_logging(config.logging)

    database = database or Database(config.database.path)
    database.init_schema()
    AchievementRepository(database).seed_definitions(
        load_achievement_definitions(config.achievements_file)
    )

    app = FastAPI(
        title="EduProgress API",
        description="Exam scoring, activity ledger and achievements",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.database = database
    app.state.today = today

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(exams_router)
    app.include_router(dashboard_router)

    return app

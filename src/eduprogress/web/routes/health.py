"""Liveness endpoint with a database round trip."""

import structlog
from fastapi import APIRouter, Depends

from eduprogress import __version__
from eduprogress.core.errors import StorageError
from eduprogress.db import Database
from eduprogress.web.deps import get_database
from eduprogress.web.schemas import HealthResponse

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(db: Database = Depends(get_database)) -> HealthResponse:
    try:
        schema_ready = db.ping()
    except StorageError:
        logger.warning("health.database_unavailable", path=str(db.path))
        return HealthResponse(
            status="degraded",
            version=__version__,
            database="unavailable",
            schema_ready=False,
        )

    return HealthResponse(
        status="ok",
        version=__version__,
        database="ok",
        schema_ready=schema_ready,
    )

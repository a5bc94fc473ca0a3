"""Route handlers for Web API."""

from eduprogress.web.routes.dashboard import router as dashboard_router
from eduprogress.web.routes.exams import router as exams_router
from eduprogress.web.routes.health import router as health_router

__all__ = [
    "dashboard_router",
    "exams_router",
    "health_router",
]

"""FastAPI dependencies: caller identity and engine construction.

Identity comes from the upstream auth layer as request headers. This module
only checks that they are present and well-formed.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Request, status

from eduprogress.config.app_config import AppConfig
from eduprogress.core.achievement_engine import AchievementEngine
from eduprogress.core.activity_ledger import ActivityLedger
from eduprogress.core.activity_pipeline import ActivityPipeline
from eduprogress.core.exam_engine import ExamAttemptEngine
from eduprogress.core.progress_aggregator import ProgressAggregator
from eduprogress.db import (
    AchievementRepository,
    ActivityRepository,
    Database,
    ExamRepository,
    ProgressRepository,
)
from eduprogress.db.database import MAX_ROW_ID
from eduprogress.utils.dates import Clock

ROLES = ("student", "teacher", "admin")


@dataclass
class CurrentUser:
    """Authenticated caller."""

    id: int
    role: str


def get_current_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> CurrentUser:
    """Resolve the caller from the auth headers, or fail with 401."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication",
        )
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication",
        )
    if not 0 <= user_id <= MAX_ROW_ID:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication",
        )

    role = (x_user_role or "student").lower()
    if role not in ROLES:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication",
        )
    return CurrentUser(id=user_id, role=role)


def require_role(*allowed: str):
    """Dependency factory: the caller must hold one of ``allowed``."""

    def _check(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return _check


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_clock(request: Request) -> Clock:
    return request.app.state.today


def get_exam_engine(
    db: Database = Depends(get_database),
    config: AppConfig = Depends(get_config),
) -> ExamAttemptEngine:
    return ExamAttemptEngine(
        ExamRepository(db),
        single_open_attempt=config.exams.single_open_attempt,
    )


def get_achievement_engine(
    db: Database = Depends(get_database),
    today: Clock = Depends(get_clock),
) -> AchievementEngine:
    return AchievementEngine(
        achievements=AchievementRepository(db),
        activity=ActivityRepository(db),
        progress=ProgressRepository(db),
        exams=ExamRepository(db),
        today=today,
    )


def get_activity_pipeline(
    db: Database = Depends(get_database),
    today: Clock = Depends(get_clock),
    achievements: AchievementEngine = Depends(get_achievement_engine),
) -> ActivityPipeline:
    return ActivityPipeline(ActivityLedger(ActivityRepository(db), today=today), achievements)


def get_progress_aggregator(
    db: Database = Depends(get_database),
    today: Clock = Depends(get_clock),
) -> ProgressAggregator:
    return ProgressAggregator(ProgressRepository(db), ActivityRepository(db), today=today)

"""Dashboard endpoints: activity, achievements and stats."""

import structlog
from fastapi import APIRouter, Depends

from eduprogress.core.achievement_engine import AchievementEngine
from eduprogress.core.activity_ledger import ActivityDeltas
from eduprogress.core.activity_pipeline import ActivityPipeline
from eduprogress.core.progress_aggregator import ProgressAggregator
from eduprogress.web.deps import (
    CurrentUser,
    get_achievement_engine,
    get_activity_pipeline,
    get_current_user,
    get_progress_aggregator,
    require_role,
)
from eduprogress.web.schemas import (
    AchievementResponse,
    ActivityLogRequest,
    ActivityLogResponse,
    EnrolledCourseResponse,
    StudentStatsResponse,
    TeacherStatsResponse,
    TeachingCourseResponse,
    WeeklyActivityResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.post("/activity/log", response_model=ActivityLogResponse)
async def log_activity(
    body: ActivityLogRequest,
    user: CurrentUser = Depends(get_current_user),
    pipeline: ActivityPipeline = Depends(get_activity_pipeline),
) -> ActivityLogResponse:
    """Add today's activity deltas and re-evaluate achievements."""
    deltas = ActivityDeltas(
        hours_spent=body.hours_spent,
        lessons_completed=body.lessons_completed,
        assignments_completed=body.assignments_completed,
        exams_taken=body.exams_taken,
    )
    result = pipeline.log(user.id, deltas)
    return ActivityLogResponse(success=True, unlocked=result.unlocked)


@router.get("/activity/weekly", response_model=WeeklyActivityResponse)
async def weekly_activity(
    user: CurrentUser = Depends(get_current_user),
    aggregator: ProgressAggregator = Depends(get_progress_aggregator),
) -> WeeklyActivityResponse:
    """Per-day activity for the last seven days."""
    return WeeklyActivityResponse(**aggregator.weekly_activity(user.id).to_dict())


@router.get("/achievements", response_model=list[AchievementResponse])
async def list_achievements(
    user: CurrentUser = Depends(get_current_user),
    engine: AchievementEngine = Depends(get_achievement_engine),
) -> list[AchievementResponse]:
    """All achievements with the caller's unlock state and progress."""
    return [AchievementResponse(**s.to_dict()) for s in engine.list_achievements(user.id)]


@router.get("/stats/student", response_model=StudentStatsResponse)
async def student_stats(
    user: CurrentUser = Depends(get_current_user),
    aggregator: ProgressAggregator = Depends(get_progress_aggregator),
) -> StudentStatsResponse:
    return StudentStatsResponse(**aggregator.student_stats(user.id).to_dict())


@router.get("/stats/teacher", response_model=TeacherStatsResponse)
async def teacher_stats(
    user: CurrentUser = Depends(require_role("teacher", "admin")),
    aggregator: ProgressAggregator = Depends(get_progress_aggregator),
) -> TeacherStatsResponse:
    """Counters over the courses the caller teaches."""
    logger.debug("teacher_stats_requested", teacher_id=user.id)
    return TeacherStatsResponse(**aggregator.teacher_stats(user.id).to_dict())


@router.get("/courses/enrolled", response_model=list[EnrolledCourseResponse])
async def enrolled_courses(
    user: CurrentUser = Depends(get_current_user),
    aggregator: ProgressAggregator = Depends(get_progress_aggregator),
) -> list[EnrolledCourseResponse]:
    """The caller's enrolled courses with progress and lesson counts."""
    return [EnrolledCourseResponse(**c.to_dict()) for c in aggregator.enrolled_courses(user.id)]


@router.get("/courses/teaching", response_model=list[TeachingCourseResponse])
async def teaching_courses(
    user: CurrentUser = Depends(require_role("teacher", "admin")),
    aggregator: ProgressAggregator = Depends(get_progress_aggregator),
) -> list[TeachingCourseResponse]:
    return [TeachingCourseResponse(**c.to_dict()) for c in aggregator.teaching_courses(user.id)]

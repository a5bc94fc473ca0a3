"""Pydantic schemas for Web API.

Serialization models for exams, attempts, activity, achievements and stats.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# EXAM SCHEMAS
# =============================================================================


class QuestionResponse(BaseModel):
    """Question as shown to a student (no answer key)."""

    id: int
    question: str
    type: str
    options: list[Any] | None = None
    points: int


class ExamResponse(BaseModel):
    """Exam metadata."""

    id: int
    course_id: int
    title: str
    description: str | None = None
    duration: int | None = None
    total_points: int | None = None
    created_at: str


class ExamDetailResponse(ExamResponse):
    """Exam with its questions."""

    questions: list[QuestionResponse]


class SubmitAnswersRequest(BaseModel):
    """Request body for submitting an attempt.

    Keys are question ids, values are the submitted answers. Any JSON value
    is accepted; only an exact match with the stored answer scores.
    """

    answers: dict[str, Any]


class AnswerResponse(BaseModel):
    """One graded answer."""

    id: int | None = None
    question_id: int
    answer: str | None = None
    is_correct: bool


class AttemptResponse(BaseModel):
    """Response for an exam attempt."""

    id: int
    exam_id: int
    student_id: int
    score: float | None = None
    total_points: int | None = None
    started_at: str
    completed_at: str | None = None
    answers: list[AnswerResponse] | None = None


# =============================================================================
# ACTIVITY SCHEMAS
# =============================================================================


class ActivityLogRequest(BaseModel):
    """Partial activity deltas; omitted fields count as zero."""

    hours_spent: float = Field(default=0.0, ge=0)
    lessons_completed: int = Field(default=0, ge=0)
    assignments_completed: int = Field(default=0, ge=0)
    exams_taken: int = Field(default=0, ge=0)


class ActivityLogResponse(BaseModel):
    """Response for a logged activity."""

    success: bool = True
    unlocked: list[str] = Field(default_factory=list)


class DayActivityResponse(BaseModel):
    day: str
    date: str
    hours: float
    completed: int


class WeeklyActivityResponse(BaseModel):
    """Last seven days of activity."""

    week_data: list[DayActivityResponse]
    total_hours: float
    total_lessons: int
    total_assignments: int


# =============================================================================
# ACHIEVEMENT SCHEMAS
# =============================================================================


class AchievementResponse(BaseModel):
    """Achievement definition with the caller's unlock state."""

    type: str
    title: str
    description: str
    icon: str = ""
    color: str = ""
    requirement_type: str
    requirement_value: float
    unlocked: bool
    unlocked_at: str | None = None
    progress: int = Field(..., ge=0, le=100)


# =============================================================================
# STATS SCHEMAS
# =============================================================================


class StudentStatsResponse(BaseModel):
    courses_completed: int
    current_courses: int
    total_hours: float
    average_progress: int


class TeacherStatsResponse(BaseModel):
    total_students: int
    active_courses: int
    pending_submissions: int
    graded_submissions: int


class EnrolledCourseResponse(BaseModel):
    """Course card on the student dashboard."""

    id: int
    title: str
    description: str | None = None
    thumbnail: str | None = None
    level: str | None = None
    progress: int
    enrolled_at: str
    teacher_name: str | None = None
    total_lessons: int
    completed_lessons: int


class TeachingCourseResponse(BaseModel):
    """Course card on the teacher dashboard."""

    id: int
    title: str
    description: str | None = None
    thumbnail: str | None = None
    level: str | None = None
    created_at: str
    students_count: int
    pending_count: int


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Liveness plus a storage round trip.

    ``status`` is "degraded" when the database cannot be queried.
    """

    status: str
    version: str
    database: str
    schema_ready: bool
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

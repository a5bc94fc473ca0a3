"""Dashboard views composed from enrollments, submissions and the ledger.

Pure reads, recomputed on every call.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Any

from eduprogress.db.activity_repository import ActivityRepository
from eduprogress.db.progress_repository import (
    EnrolledCourseRecord,
    ProgressRepository,
    TaughtCourseRecord,
)
from eduprogress.utils.dates import Clock, round_half_up, utc_today

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass
class StudentStats:
    courses_completed: int
    current_courses: int
    total_hours: float
    average_progress: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TeacherStats:
    total_students: int
    active_courses: int
    pending_submissions: int
    graded_submissions: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DayActivity:
    day: str
    date: str
    hours: float
    completed: int


@dataclass
class WeeklyActivity:
    week_data: list[DayActivity]
    total_hours: float
    total_lessons: int
    total_assignments: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class EnrolledCourse:
    """A student's course card."""

    id: int
    title: str
    description: str | None
    thumbnail: str | None
    level: str | None
    progress: int
    enrolled_at: str
    teacher_name: str | None
    total_lessons: int
    completed_lessons: int

    @classmethod
    def from_record(cls, record: EnrolledCourseRecord) -> EnrolledCourse:
        # Integer division, so a lesson only counts once it is fully covered
        completed = record.progress * record.total_lessons // 100
        return cls(**asdict(record), completed_lessons=completed)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TeachingCourse:
    """A teacher's course card."""

    id: int
    title: str
    description: str | None
    thumbnail: str | None
    level: str | None
    created_at: str
    students_count: int
    pending_count: int

    @classmethod
    def from_record(cls, record: TaughtCourseRecord) -> TeachingCourse:
        return cls(**asdict(record))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ProgressAggregator:
    """Student and teacher dashboard numbers."""

    def __init__(
        self,
        progress: ProgressRepository,
        activity: ActivityRepository,
        today: Clock = utc_today,
    ) -> None:
        self._progress = progress
        self._activity = activity
        self._today = today

    def student_stats(self, student_id: int) -> StudentStats:
        enrollments = self._progress.enrollment_summary(student_id)
        totals = self._activity.totals(student_id)
        return StudentStats(
            courses_completed=enrollments.completed,
            current_courses=enrollments.in_progress,
            total_hours=round_half_up(totals.hours_spent, 1),
            average_progress=int(round_half_up(enrollments.average_progress)),
        )

    def teacher_stats(self, teacher_id: int) -> TeacherStats:
        summary = self._progress.teaching_summary(teacher_id)
        return TeacherStats(
            total_students=summary.total_students,
            active_courses=summary.active_courses,
            pending_submissions=summary.pending_submissions,
            graded_submissions=summary.graded_submissions,
        )

    def weekly_activity(self, user_id: int) -> WeeklyActivity:
        """The last seven days ending today, oldest first.

        Totals cover every record dated today - 7 days or later, which is
        one day wider than the per-day series.
        """
        today = self._today()
        start = today - timedelta(days=6)
        records = self._activity.records_between(user_id, start, today)

        week_data = []
        for offset in range(7):
            day = start + timedelta(days=offset)
            record = records.get(day.isoformat())
            week_data.append(
                DayActivity(
                    day=WEEKDAY_NAMES[day.weekday()],
                    date=day.isoformat(),
                    hours=record.hours_spent if record else 0.0,
                    completed=(record.lessons_completed + record.assignments_completed)
                    if record
                    else 0,
                )
            )

        totals = self._activity.totals(user_id, since=today - timedelta(days=7))
        return WeeklyActivity(
            week_data=week_data,
            total_hours=round_half_up(totals.hours_spent, 1),
            total_lessons=totals.lessons_completed,
            total_assignments=totals.assignments_completed,
        )

    def enrolled_courses(self, student_id: int) -> list[EnrolledCourse]:
        """Enrolled courses with lesson counts, most recent enrollment first."""
        return [
            EnrolledCourse.from_record(r) for r in self._progress.enrolled_courses(student_id)
        ]

    def teaching_courses(self, teacher_id: int) -> list[TeachingCourse]:
        """Owned courses with student and ungraded-submission counts."""
        return [TeachingCourse.from_record(r) for r in self._progress.taught_courses(teacher_id)]

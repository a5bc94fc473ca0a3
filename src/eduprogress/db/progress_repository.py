"""Read-only queries over courses, lessons, enrollments and submissions.

These tables belong to course management. The achievement engine and the
dashboards only count and list rows in them.
"""

from __future__ import annotations

from dataclasses import dataclass

from eduprogress.db.database import Database


@dataclass
class EnrollmentSummary:
    """Enrollment counters for one student."""

    completed: int = 0
    in_progress: int = 0
    average_progress: float = 0.0


@dataclass
class TeachingSummary:
    """Counters over the courses a teacher owns."""

    total_students: int = 0
    active_courses: int = 0
    pending_submissions: int = 0
    graded_submissions: int = 0


@dataclass
class EnrolledCourseRecord:
    """One enrollment joined with its course."""

    id: int
    title: str
    description: str | None
    thumbnail: str | None
    level: str | None
    progress: int
    enrolled_at: str
    teacher_name: str | None
    total_lessons: int


@dataclass
class TaughtCourseRecord:
    """A course with its enrollment and grading backlog counts."""

    id: int
    title: str
    description: str | None
    thumbnail: str | None
    level: str | None
    created_at: str
    students_count: int
    pending_count: int


class ProgressRepository:
    """Aggregate queries for achievements and dashboards."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def count_completed_courses(self, student_id: int) -> int:
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS count FROM enrollments WHERE student_id = ? AND progress = 100",
                (student_id,),
            ).fetchone()

        return row["count"]

    def count_graded_submissions(self, student_id: int) -> int:
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS count FROM submissions WHERE student_id = ? AND status = 'graded'",
                (student_id,),
            ).fetchone()

        return row["count"]

    def enrollment_summary(self, student_id: int) -> EnrollmentSummary:
        with self._db.connect() as conn:
            row = conn.execute(
                """
                SELECT
                    COALESCE(SUM(CASE WHEN progress = 100 THEN 1 ELSE 0 END), 0) AS completed,
                    COALESCE(SUM(CASE WHEN progress < 100 THEN 1 ELSE 0 END), 0) AS in_progress,
                    COALESCE(AVG(progress), 0) AS average_progress
                FROM enrollments
                WHERE student_id = ?
                """,
                (student_id,),
            ).fetchone()

        return EnrollmentSummary(
            completed=int(row["completed"]),
            in_progress=int(row["in_progress"]),
            average_progress=float(row["average_progress"]),
        )

    def teaching_summary(self, teacher_id: int) -> TeachingSummary:
        with self._db.connect() as conn:
            total_students = conn.execute(
                """
                SELECT COUNT(DISTINCT e.student_id) AS count
                FROM enrollments e
                JOIN courses c ON e.course_id = c.id
                WHERE c.teacher_id = ?
                """,
                (teacher_id,),
            ).fetchone()["count"]

            active_courses = conn.execute(
                "SELECT COUNT(*) AS count FROM courses WHERE teacher_id = ?", (teacher_id,)
            ).fetchone()["count"]

            pending = conn.execute(
                """
                SELECT COUNT(*) AS count
                FROM submissions s
                JOIN assignments a ON s.assignment_id = a.id
                JOIN courses c ON a.course_id = c.id
                WHERE c.teacher_id = ? AND s.status = 'submitted' AND s.grade IS NULL
                """,
                (teacher_id,),
            ).fetchone()["count"]

            graded = conn.execute(
                """
                SELECT COUNT(*) AS count
                FROM submissions s
                JOIN assignments a ON s.assignment_id = a.id
                JOIN courses c ON a.course_id = c.id
                WHERE c.teacher_id = ? AND s.grade IS NOT NULL
                """,
                (teacher_id,),
            ).fetchone()["count"]

        return TeachingSummary(
            total_students=total_students,
            active_courses=active_courses,
            pending_submissions=pending,
            graded_submissions=graded,
        )

    def enrolled_courses(self, student_id: int) -> list[EnrolledCourseRecord]:
        """Courses a student is enrolled in, most recent enrollment first.

        ``teacher_name`` is None when the teacher has no users row.
        """
        with self._db.connect() as conn:
            rows = conn.execute(
                """
                SELECT
                    c.id, c.title, c.description, c.thumbnail, c.level,
                    e.progress, e.enrolled_at,
                    u.name AS teacher_name,
                    (SELECT COUNT(*) FROM lessons l WHERE l.course_id = c.id) AS total_lessons
                FROM enrollments e
                JOIN courses c ON e.course_id = c.id
                LEFT JOIN users u ON c.teacher_id = u.id
                WHERE e.student_id = ?
                ORDER BY e.enrolled_at DESC, e.id DESC
                """,
                (student_id,),
            ).fetchall()

        return [EnrolledCourseRecord(**dict(row)) for row in rows]

    def taught_courses(self, teacher_id: int) -> list[TaughtCourseRecord]:
        """Courses a teacher owns, newest first."""
        with self._db.connect() as conn:
            rows = conn.execute(
                """
                SELECT
                    c.id, c.title, c.description, c.thumbnail, c.level, c.created_at,
                    (SELECT COUNT(*) FROM enrollments e WHERE e.course_id = c.id) AS students_count,
                    (
                        SELECT COUNT(*) FROM submissions s
                        JOIN assignments a ON s.assignment_id = a.id
                        WHERE a.course_id = c.id AND s.status = 'submitted' AND s.grade IS NULL
                    ) AS pending_count
                FROM courses c
                WHERE c.teacher_id = ?
                ORDER BY c.created_at DESC, c.id DESC
                """,
                (teacher_id,),
            ).fetchall()

        return [TaughtCourseRecord(**dict(row)) for row in rows]

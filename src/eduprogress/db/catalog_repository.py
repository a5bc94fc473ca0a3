"""Writes for collaborator-owned rows.

Course management normally owns users, courses, lessons, exams, questions,
enrollments and submissions. This repository writes the same rows for the
`seed-demo` CLI command and for tests; the engines never call it.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from eduprogress.db.database import Database

logger = structlog.get_logger(__name__)


class CatalogRepository:
    """Insert/update helpers for course-management tables."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def create_user(self, name: str, role: str = "student", email: str | None = None) -> int:
        """Insert a user row.

        Raises:
            ConflictError: If the email is already taken
        """
        with self._db.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO users (name, email, role) VALUES (?, ?, ?)",
                (name, email, role),
            )
        return cursor.lastrowid

    def create_course(
        self,
        teacher_id: int,
        title: str,
        description: str = "",
        level: str = "beginner",
        thumbnail: str | None = None,
    ) -> int:
        with self._db.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO courses (teacher_id, title, description, level, thumbnail)
                VALUES (?, ?, ?, ?, ?)
                """,
                (teacher_id, title, description, level, thumbnail),
            )
        return cursor.lastrowid

    def add_lesson(
        self, course_id: int, title: str, content: str = "", order_num: int | None = None
    ) -> int:
        with self._db.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO lessons (course_id, title, content, order_num) VALUES (?, ?, ?, ?)",
                (course_id, title, content, order_num),
            )
        return cursor.lastrowid

    def create_exam(
        self,
        course_id: int,
        title: str,
        duration: int | None = None,
        total_points: int = 100,
        description: str = "",
    ) -> int:
        with self._db.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO exams (course_id, title, description, duration, total_points)
                VALUES (?, ?, ?, ?, ?)
                """,
                (course_id, title, description, duration, total_points),
            )
        return cursor.lastrowid

    def add_question(
        self,
        exam_id: int,
        question: str,
        correct_answer: str,
        points: int = 1,
        type: str = "multiple_choice",
        options: list[Any] | None = None,
    ) -> int:
        with self._db.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO exam_questions (exam_id, question, type, options, correct_answer, points)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    exam_id,
                    question,
                    type,
                    json.dumps(options) if options is not None else None,
                    correct_answer,
                    points,
                ),
            )
        return cursor.lastrowid

    def enroll(self, student_id: int, course_id: int, progress: int = 0) -> int:
        """Enroll a student.

        Raises:
            ConflictError: If the student is already enrolled
        """
        with self._db.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO enrollments (student_id, course_id, progress) VALUES (?, ?, ?)",
                (student_id, course_id, progress),
            )
        logger.debug("enrollments.inserted", student_id=student_id, course_id=course_id)
        return cursor.lastrowid

    def set_progress(self, student_id: int, course_id: int, progress: int) -> None:
        with self._db.connect() as conn:
            conn.execute(
                "UPDATE enrollments SET progress = ? WHERE student_id = ? AND course_id = ?",
                (progress, student_id, course_id),
            )

    def create_assignment(self, course_id: int, title: str, due_date: str | None = None) -> int:
        with self._db.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO assignments (course_id, title, due_date) VALUES (?, ?, ?)",
                (course_id, title, due_date),
            )
        return cursor.lastrowid

    def submit_assignment(self, assignment_id: int, student_id: int, content: str = "") -> int:
        with self._db.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO submissions (assignment_id, student_id, content) VALUES (?, ?, ?)",
                (assignment_id, student_id, content),
            )
        return cursor.lastrowid

    def grade_submission(self, submission_id: int, grade: float) -> None:
        with self._db.connect() as conn:
            conn.execute(
                """
                UPDATE submissions
                SET status = 'graded', grade = ?, graded_at = datetime('now')
                WHERE id = ?
                """,
                (grade, submission_id),
            )

"""Repository for exams, questions, attempts and answers.

Exams and questions are written by course management; this module only
reads them. Attempts and answers are owned by the exam attempt engine.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Iterable

import structlog

from eduprogress.db.database import Database, is_storable_id

logger = structlog.get_logger(__name__)


@dataclass
class ExamRecord:
    """Exam metadata."""

    id: int
    course_id: int
    title: str
    description: str | None
    duration: int | None
    total_points: int | None
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "course_id": self.course_id,
            "title": self.title,
            "description": self.description,
            "duration": self.duration,
            "total_points": self.total_points,
            "created_at": self.created_at,
        }


@dataclass
class QuestionRecord:
    """Exam question, including its answer key."""

    id: int
    exam_id: int
    question: str
    type: str
    options: list[Any] | None
    correct_answer: str | None
    points: int

    def to_public_dict(self) -> dict[str, Any]:
        """Serialize without the answer key."""
        return {
            "id": self.id,
            "question": self.question,
            "type": self.type,
            "options": self.options,
            "points": self.points,
        }


@dataclass
class AnswerRecord:
    """One graded answer inside an attempt."""

    question_id: int
    answer: str | None
    is_correct: bool
    id: int | None = None
    attempt_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "attempt_id": self.attempt_id,
            "question_id": self.question_id,
            "answer": self.answer,
            "is_correct": self.is_correct,
        }


@dataclass
class AttemptRecord:
    """An exam attempt.

    ``completed_at is None`` means the attempt is still in progress.
    """

    id: int
    exam_id: int
    student_id: int
    score: float | None
    total_points: int | None
    started_at: str
    completed_at: str | None
    answers: list[AnswerRecord] = field(default_factory=list)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def to_dict(self, include_answers: bool = False) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "exam_id": self.exam_id,
            "student_id": self.student_id,
            "score": self.score,
            "total_points": self.total_points,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }
        if include_answers:
            result["answers"] = [a.to_dict() for a in self.answers]
        return result


class ExamRepository:
    """Storage access for the exam attempt lifecycle."""

    def __init__(self, db: Database) -> None:
        self._db = db

    # -------------------------------------------------------------------------
    # Exams and questions (read-only)
    # -------------------------------------------------------------------------

    def get_exam(self, exam_id: int) -> ExamRecord | None:
        if not is_storable_id(exam_id):
            return None
        with self._db.connect() as conn:
            row = conn.execute("SELECT * FROM exams WHERE id = ?", (exam_id,)).fetchone()

        return _row_to_exam(row) if row is not None else None

    def list_exams_for_course(self, course_id: int) -> list[ExamRecord]:
        if not is_storable_id(course_id):
            return []
        with self._db.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM exams WHERE course_id = ? ORDER BY id", (course_id,)
            ).fetchall()

        return [_row_to_exam(row) for row in rows]

    def get_questions(self, exam_id: int) -> list[QuestionRecord]:
        with self._db.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM exam_questions WHERE exam_id = ? ORDER BY id", (exam_id,)
            ).fetchall()

        return [_row_to_question(row) for row in rows]

    def get_questions_by_ids(self, question_ids: Iterable[int]) -> dict[int, QuestionRecord]:
        """Look up questions by id, regardless of which exam they belong to.

        Returns:
            Mapping of question id to record. Unknown ids are simply absent.
        """
        ids = sorted(set(question_ids))
        if not ids:
            return {}

        placeholders = ", ".join("?" for _ in ids)
        with self._db.connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM exam_questions WHERE id IN ({placeholders})", ids
            ).fetchall()

        return {row["id"]: _row_to_question(row) for row in rows}

    # -------------------------------------------------------------------------
    # Attempts
    # -------------------------------------------------------------------------

    def create_attempt(self, exam_id: int, student_id: int, started_at: str) -> AttemptRecord:
        with self._db.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO exam_attempts (exam_id, student_id, started_at) VALUES (?, ?, ?)",
                (exam_id, student_id, started_at),
            )
            row = conn.execute(
                "SELECT * FROM exam_attempts WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()

        logger.debug("exam_attempts.inserted", attempt_id=row["id"], exam_id=exam_id)
        return _row_to_attempt(row)

    def create_attempt_if_none_open(
        self, exam_id: int, student_id: int, started_at: str
    ) -> AttemptRecord | None:
        """Create an attempt only if the student has no open one for this exam.

        Returns:
            The new attempt, or None when an open attempt already exists
        """
        with self._db.connect(immediate=True) as conn:
            open_row = conn.execute(
                """
                SELECT id FROM exam_attempts
                WHERE exam_id = ? AND student_id = ? AND completed_at IS NULL
                """,
                (exam_id, student_id),
            ).fetchone()
            if open_row is not None:
                return None

            cursor = conn.execute(
                "INSERT INTO exam_attempts (exam_id, student_id, started_at) VALUES (?, ?, ?)",
                (exam_id, student_id, started_at),
            )
            row = conn.execute(
                "SELECT * FROM exam_attempts WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()

        return _row_to_attempt(row)

    def get_attempt(self, attempt_id: int, include_answers: bool = False) -> AttemptRecord | None:
        if not is_storable_id(attempt_id):
            return None
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT * FROM exam_attempts WHERE id = ?", (attempt_id,)
            ).fetchone()
            if row is None:
                return None

            attempt = _row_to_attempt(row)
            if include_answers:
                attempt.answers = _fetch_answers(conn, attempt_id)

        return attempt

    def complete_attempt(
        self,
        attempt_id: int,
        answers: list[AnswerRecord],
        score: float,
        total_points: int,
        completed_at: str,
    ) -> AttemptRecord | None:
        """Persist graded answers and close the attempt in one transaction.

        The attempt row is only updated while ``completed_at`` is still NULL.
        If another submission got there first nothing is written at all.

        Returns:
            The completed attempt, or None if it was no longer in progress
        """
        with self._db.connect(immediate=True) as conn:
            cursor = conn.execute(
                """
                UPDATE exam_attempts
                SET score = ?, total_points = ?, completed_at = ?
                WHERE id = ? AND completed_at IS NULL
                """,
                (score, total_points, completed_at, attempt_id),
            )
            if cursor.rowcount == 0:
                return None

            conn.executemany(
                """
                INSERT INTO exam_answers (attempt_id, question_id, answer, is_correct)
                VALUES (?, ?, ?, ?)
                """,
                [(attempt_id, a.question_id, a.answer, int(a.is_correct)) for a in answers],
            )

            row = conn.execute(
                "SELECT * FROM exam_attempts WHERE id = ?", (attempt_id,)
            ).fetchone()
            attempt = _row_to_attempt(row)
            attempt.answers = _fetch_answers(conn, attempt_id)

        logger.debug("exam_attempts.completed", attempt_id=attempt_id, answers=len(answers))
        return attempt

    def has_perfect_attempt(self, student_id: int) -> bool:
        """True if any completed attempt scored every answered point."""
        with self._db.connect() as conn:
            row = conn.execute(
                """
                SELECT COUNT(*) AS count FROM exam_attempts
                WHERE student_id = ? AND score = total_points AND total_points > 0
                """,
                (student_id,),
            ).fetchone()

        return row["count"] > 0


def _fetch_answers(conn: sqlite3.Connection, attempt_id: int) -> list[AnswerRecord]:
    rows = conn.execute(
        "SELECT * FROM exam_answers WHERE attempt_id = ? ORDER BY id", (attempt_id,)
    ).fetchall()
    return [
        AnswerRecord(
            id=row["id"],
            attempt_id=row["attempt_id"],
            question_id=row["question_id"],
            answer=row["answer"],
            is_correct=bool(row["is_correct"]),
        )
        for row in rows
    ]


def _row_to_exam(row: sqlite3.Row) -> ExamRecord:
    return ExamRecord(
        id=row["id"],
        course_id=row["course_id"],
        title=row["title"],
        description=row["description"],
        duration=row["duration"],
        total_points=row["total_points"],
        created_at=row["created_at"],
    )


def _row_to_question(row: sqlite3.Row) -> QuestionRecord:
    options = json.loads(row["options"]) if row["options"] else None
    return QuestionRecord(
        id=row["id"],
        exam_id=row["exam_id"],
        question=row["question"],
        type=row["type"],
        options=options,
        correct_answer=row["correct_answer"],
        points=row["points"],
    )


def _row_to_attempt(row: sqlite3.Row) -> AttemptRecord:
    return AttemptRecord(
        id=row["id"],
        exam_id=row["exam_id"],
        student_id=row["student_id"],
        score=row["score"],
        total_points=row["total_points"],
        started_at=row["started_at"],
        completed_at=row["completed_at"],
    )

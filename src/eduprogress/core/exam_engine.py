"""Exam attempt lifecycle and automatic scoring.

Responsibilities:
- Start attempts (InProgress)
- Grade a submitted answer mapping and close the attempt (Completed)
- Read attempts back for their owner

Scoring rules:
- Only the questions present in the submitted mapping count; an exam
  question nobody answered adds nothing to ``total_points``.
- An answer is correct only if it is exactly equal to ``correct_answer``.
  No trimming, no case folding, and ``4`` never equals ``"4"``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Mapping

import structlog

from eduprogress.core.errors import (
    AttemptAlreadyCompletedError,
    AttemptNotFoundError,
    AttemptOwnershipError,
    ExamNotFoundError,
    OpenAttemptExistsError,
    QuestionNotFoundError,
    ValidationError,
)
from eduprogress.db.database import MAX_ROW_ID
from eduprogress.db.exams_repository import (
    AnswerRecord,
    AttemptRecord,
    ExamRecord,
    ExamRepository,
    QuestionRecord,
)
from eduprogress.utils.dates import utc_now_iso

logger = structlog.get_logger(__name__)

_QUESTION_ID_RE = re.compile(r"0|[1-9][0-9]*")


@dataclass
class GradingResult:
    """Outcome of grading one answer mapping, before it is persisted."""

    answers: list[AnswerRecord]
    score: float
    total_points: int


def _parse_question_id(raw: Any) -> int:
    """Question ids arrive as JSON object keys, i.e. strings.

    Only plain decimal form is accepted ("12", not "012", " 12" or "1_2"),
    so two different keys can never name the same question.
    """
    if isinstance(raw, bool):
        raise ValidationError(f"Invalid question id: {raw!r}")
    if isinstance(raw, int):
        question_id = raw
    elif isinstance(raw, str) and _QUESTION_ID_RE.fullmatch(raw):
        question_id = int(raw)
    else:
        raise ValidationError(f"Invalid question id: {raw!r}")

    if not 0 <= question_id <= MAX_ROW_ID:
        raise ValidationError(f"Invalid question id: {raw!r}")
    return question_id


def _parse_answers(answers: Mapping[Any, Any]) -> dict[int, Any]:
    """Key the submission by question id.

    Raises:
        ValidationError: If a key is not a question id, or two keys name
            the same question
    """
    parsed: dict[int, Any] = {}
    for raw_id, submitted in answers.items():
        question_id = _parse_question_id(raw_id)
        if question_id in parsed:
            raise ValidationError(f"Question {question_id} is answered more than once")
        parsed[question_id] = submitted
    return parsed


def _stored_answer(answer: Any) -> str | None:
    """Text form of a submitted answer for the answers table."""
    if answer is None or isinstance(answer, str):
        return answer
    return json.dumps(answer)


def grade_answers(
    answers: Mapping[int, Any],
    questions: Mapping[int, QuestionRecord],
) -> GradingResult:
    """Score a submission against the answer key.

    Args:
        answers: Question id to submitted answer
        questions: Answer key for (at least) every submitted question

    Returns:
        GradingResult with one AnswerRecord per submitted entry

    Raises:
        QuestionNotFoundError: If a submitted question is not in ``questions``
    """
    graded: list[AnswerRecord] = []
    score = 0.0
    total_points = 0

    for question_id, submitted in answers.items():
        question = questions.get(question_id)
        if question is None:
            raise QuestionNotFoundError(f"Question {question_id} not found")

        is_correct = submitted == question.correct_answer
        total_points += question.points
        if is_correct:
            score += question.points

        graded.append(
            AnswerRecord(
                question_id=question_id,
                answer=_stored_answer(submitted),
                is_correct=is_correct,
            )
        )

    return GradingResult(answers=graded, score=score, total_points=total_points)


class ExamAttemptEngine:
    """Start, submit and read exam attempts.

    Args:
        exams: Storage for exams, questions and attempts
        single_open_attempt: Refuse to start a second attempt while one is
            still in progress for the same (student, exam)
    """

    def __init__(self, exams: ExamRepository, single_open_attempt: bool = False) -> None:
        self._exams = exams
        self._single_open_attempt = single_open_attempt

    def get_exam(self, exam_id: int) -> tuple[ExamRecord, list[QuestionRecord]]:
        """Exam metadata with its questions.

        Raises:
            ExamNotFoundError: If the exam does not exist
        """
        exam = self._exams.get_exam(exam_id)
        if exam is None:
            raise ExamNotFoundError(f"Exam {exam_id} not found")
        return exam, self._exams.get_questions(exam_id)

    def list_course_exams(self, course_id: int) -> list[ExamRecord]:
        return self._exams.list_exams_for_course(course_id)

    def start_attempt(self, exam_id: int, student_id: int) -> AttemptRecord:
        """Open a new attempt.

        Raises:
            ExamNotFoundError: If the exam does not exist
            OpenAttemptExistsError: If single_open_attempt is on and the
                student already has an attempt in progress
        """
        if self._exams.get_exam(exam_id) is None:
            raise ExamNotFoundError(f"Exam {exam_id} not found")

        started_at = utc_now_iso()
        if self._single_open_attempt:
            attempt = self._exams.create_attempt_if_none_open(exam_id, student_id, started_at)
            if attempt is None:
                raise OpenAttemptExistsError(
                    f"Student {student_id} already has an open attempt for exam {exam_id}"
                )
        else:
            attempt = self._exams.create_attempt(exam_id, student_id, started_at)

        logger.info(
            "exam_attempt.started",
            attempt_id=attempt.id,
            exam_id=exam_id,
            student_id=student_id,
        )
        return attempt

    def submit_answers(
        self,
        attempt_id: int,
        student_id: int,
        answers: Mapping[Any, Any],
    ) -> AttemptRecord:
        """Grade the answers and complete the attempt.

        Args:
            attempt_id: Attempt to complete
            student_id: Caller; must own the attempt
            answers: Question id (int or numeric string) to submitted answer

        Returns:
            The completed attempt with its answer rows

        Raises:
            AttemptNotFoundError: If the attempt does not exist
            AttemptOwnershipError: If the attempt belongs to someone else
            AttemptAlreadyCompletedError: If it was already submitted
            ValidationError: If a key is not a question id, or two keys
                name the same question
            QuestionNotFoundError: If a question id is unknown; nothing is
                written in that case
        """
        attempt = self._exams.get_attempt(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(f"Attempt {attempt_id} not found")
        if attempt.student_id != student_id:
            raise AttemptOwnershipError(f"Attempt {attempt_id} belongs to another student")
        if attempt.is_completed:
            raise AttemptAlreadyCompletedError(f"Attempt {attempt_id} is already completed")

        parsed = _parse_answers(answers)
        questions = self._exams.get_questions_by_ids(parsed.keys())
        result = grade_answers(parsed, questions)

        completed = self._exams.complete_attempt(
            attempt_id,
            result.answers,
            score=result.score,
            total_points=result.total_points,
            completed_at=utc_now_iso(),
        )
        if completed is None:
            # Lost the race against a concurrent submission
            logger.warning("exam_attempt.double_submit", attempt_id=attempt_id)
            raise AttemptAlreadyCompletedError(f"Attempt {attempt_id} is already completed")

        logger.info(
            "exam_attempt.submitted",
            attempt_id=attempt_id,
            student_id=student_id,
            answers_count=len(result.answers),
            score=result.score,
            total_points=result.total_points,
        )
        return completed

    def get_attempt(self, attempt_id: int, student_id: int) -> AttemptRecord:
        """Attempt with its answers, for its owner only.

        Raises:
            AttemptNotFoundError: If the attempt does not exist
            AttemptOwnershipError: If the attempt belongs to someone else
        """
        attempt = self._exams.get_attempt(attempt_id, include_answers=True)
        if attempt is None:
            raise AttemptNotFoundError(f"Attempt {attempt_id} not found")
        if attempt.student_id != student_id:
            raise AttemptOwnershipError(f"Attempt {attempt_id} belongs to another student")
        return attempt

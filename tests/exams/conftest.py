"""Fixtures for exam attempt tests."""

import pytest

from eduprogress.core.exam_engine import ExamAttemptEngine


@pytest.fixture
def engine(exam_repo) -> ExamAttemptEngine:
    return ExamAttemptEngine(exam_repo)


@pytest.fixture
def strict_engine(exam_repo) -> ExamAttemptEngine:
    """Engine that allows one open attempt per (student, exam)."""
    return ExamAttemptEngine(exam_repo, single_open_attempt=True)


@pytest.fixture
def sample_exam(catalog) -> dict:
    """Course with one exam of three questions.

    q_arith: "2+2?" -> "4" (10 points)
    q_capital: "Capital of France?" -> "Paris" (5 points)
    q_tf: "The sky is green" -> "false" (2 points)
    """
    course_id = catalog.create_course(teacher_id=1, title="Basics")
    exam_id = catalog.create_exam(course_id, "Quiz 1", duration=30)
    return {
        "course_id": course_id,
        "exam_id": exam_id,
        "q_arith": catalog.add_question(
            exam_id, "2+2?", "4", points=10, options=["3", "4", "5"]
        ),
        "q_capital": catalog.add_question(
            exam_id, "Capital of France?", "Paris", points=5, type="short_answer"
        ),
        "q_tf": catalog.add_question(
            exam_id, "The sky is green", "false", points=2, type="true_false"
        ),
    }

"""Tests for answer grading (pure, no storage)."""

import pytest

from eduprogress.core.errors import QuestionNotFoundError
from eduprogress.core.exam_engine import grade_answers
from eduprogress.db.exams_repository import QuestionRecord


def _question(qid: int, correct: str, points: int = 1) -> QuestionRecord:
    return QuestionRecord(
        id=qid,
        exam_id=1,
        question=f"Question {qid}",
        type="short_answer",
        options=None,
        correct_answer=correct,
        points=points,
    )


@pytest.fixture
def answer_key() -> dict[int, QuestionRecord]:
    return {
        1: _question(1, "4", points=10),
        2: _question(2, "Paris", points=5),
        3: _question(3, "false", points=2),
    }


class TestGradeAnswers:
    """Tests for grade_answers."""

    def test_correct_answer_earns_points(self, answer_key):
        result = grade_answers({1: "4"}, answer_key)

        assert result.score == 10
        assert result.total_points == 10
        assert result.answers[0].is_correct is True

    def test_wrong_answer_earns_nothing(self, answer_key):
        result = grade_answers({1: "3"}, answer_key)

        assert result.score == 0
        assert result.total_points == 10
        assert result.answers[0].is_correct is False

    def test_total_points_only_counts_submitted_questions(self, answer_key):
        """Unanswered questions add nothing to the total."""
        result = grade_answers({1: "4", 2: "Rome"}, answer_key)

        assert result.total_points == 15
        assert result.score == 10
        assert len(result.answers) == 2

    def test_score_never_exceeds_total(self, answer_key):
        result = grade_answers({1: "4", 2: "Paris", 3: "false"}, answer_key)

        assert result.score == result.total_points == 17

    @pytest.mark.parametrize("submitted", [" 4", "4 ", "four", "04"])
    def test_no_trimming_or_normalization(self, answer_key, submitted):
        result = grade_answers({1: submitted}, answer_key)
        assert result.answers[0].is_correct is False

    def test_comparison_is_case_sensitive(self, answer_key):
        result = grade_answers({2: "paris"}, answer_key)
        assert result.answers[0].is_correct is False

    def test_number_never_equals_string(self, answer_key):
        """4 and "4" are different values."""
        result = grade_answers({1: 4}, answer_key)

        assert result.answers[0].is_correct is False
        assert result.answers[0].answer == "4"

    def test_null_answer_is_stored_as_null(self, answer_key):
        result = grade_answers({1: None}, answer_key)

        assert result.answers[0].answer is None
        assert result.answers[0].is_correct is False

    def test_empty_mapping(self, answer_key):
        result = grade_answers({}, answer_key)

        assert result.score == 0
        assert result.total_points == 0
        assert result.answers == []

    def test_unknown_question_raises(self, answer_key):
        with pytest.raises(QuestionNotFoundError, match="99"):
            grade_answers({1: "4", 99: "x"}, answer_key)

"""Tests for achievement stats, listing and unlocking."""

from datetime import timedelta

from eduprogress.core.activity_ledger import ActivityDeltas
from eduprogress.db.exams_repository import AnswerRecord

USER_ID = 7


def _status(statuses, achievement_type):
    return next(s for s in statuses if s.definition.type == achievement_type)


def _unlock_rows(db, user_id: int) -> list:
    with db.connect() as conn:
        return conn.execute(
            "SELECT * FROM achievements WHERE user_id = ?", (user_id,)
        ).fetchall()


class TestComputeStats:
    """Tests for AchievementEngine.compute_stats."""

    def test_fresh_user(self, achievement_engine):
        stats = achievement_engine.compute_stats(USER_ID)

        assert stats.lessons_completed == 0
        assert stats.courses_completed == 0
        assert stats.total_hours == 0
        assert stats.assignments_completed == 0
        assert stats.streak == 0
        assert stats.perfect_exam is False

    def test_sources(self, achievement_engine, activity_repo, catalog, today):
        activity_repo.add(USER_ID, today, hours_spent=1.5, lessons_completed=2)
        activity_repo.add(USER_ID, today - timedelta(days=1), hours_spent=1)

        course_a = catalog.create_course(1, "A")
        course_b = catalog.create_course(1, "B")
        catalog.enroll(USER_ID, course_a, progress=100)
        catalog.enroll(USER_ID, course_b, progress=40)

        assignment = catalog.create_assignment(course_a, "Essay")
        graded = catalog.submit_assignment(assignment, USER_ID)
        catalog.grade_submission(graded, 90)
        catalog.submit_assignment(assignment, USER_ID)

        stats = achievement_engine.compute_stats(USER_ID)

        assert stats.lessons_completed == 2
        assert stats.total_hours == 2.5
        assert stats.courses_completed == 1
        # Ungraded submissions do not count
        assert stats.assignments_completed == 1
        assert stats.streak == 2


class TestListAchievements:
    """Tests for AchievementEngine.list_achievements."""

    def test_lists_every_definition_in_order(self, achievement_engine, definitions):
        statuses = achievement_engine.list_achievements(USER_ID)

        assert [s.definition.type for s in statuses] == [d.type for d in definitions]
        assert all(s.unlocked is False for s in statuses)
        assert all(s.unlocked_at is None for s in statuses)
        assert all(s.progress == 0 for s in statuses)

    def test_progress_in_range(self, achievement_engine, activity_repo, today):
        activity_repo.add(USER_ID, today, hours_spent=100, lessons_completed=3)

        statuses = achievement_engine.list_achievements(USER_ID)

        assert all(0 <= s.progress <= 100 for s in statuses)
        assert _status(statuses, "lessons_5").progress == 60
        assert _status(statuses, "hours_3").progress == 100

    def test_streak_progress_from_consecutive_days(self, achievement_engine, activity_repo, today):
        activity_repo.add(USER_ID, today, lessons_completed=1)
        activity_repo.add(USER_ID, today - timedelta(days=1), hours_spent=0.5)

        status = _status(achievement_engine.list_achievements(USER_ID), "streak_3")

        assert status.progress == 67
        assert status.unlocked is False

    def test_to_dict_merges_definition(self, achievement_engine):
        data = _status(achievement_engine.list_achievements(USER_ID), "lessons_5").to_dict()

        assert data["type"] == "lessons_5"
        assert data["title"] == "Five Lessons"
        assert data["requirement_type"] == "lessons"
        assert data["requirement_value"] == 5
        assert data["unlocked"] is False
        assert data["progress"] == 0


class TestEvaluateUnlocks:
    """Tests for the unlock projection."""

    def test_unlocks_at_threshold(self, achievement_engine, activity_repo, today):
        activity_repo.add(USER_ID, today, lessons_completed=5)

        unlocked = achievement_engine.evaluate_unlocks(USER_ID)

        assert unlocked == ["lessons_5"]
        status = _status(achievement_engine.list_achievements(USER_ID), "lessons_5")
        assert status.unlocked is True
        assert status.unlocked_at is not None
        assert status.progress == 100

    def test_below_threshold_stays_locked(self, achievement_engine, activity_repo, today):
        activity_repo.add(USER_ID, today, lessons_completed=4)

        assert achievement_engine.evaluate_unlocks(USER_ID) == []

    def test_idempotent(self, achievement_engine, activity_repo, db, today):
        activity_repo.add(USER_ID, today, lessons_completed=5)
        achievement_engine.evaluate_unlocks(USER_ID)
        first_at = _unlock_rows(db, USER_ID)[0]["unlocked_at"]

        activity_repo.add(USER_ID, today, lessons_completed=5)
        assert achievement_engine.evaluate_unlocks(USER_ID) == []

        rows = _unlock_rows(db, USER_ID)
        assert len(rows) == 1
        assert rows[0]["unlocked_at"] == first_at

    def test_courses_hours_and_assignments(
        self, achievement_engine, activity_repo, catalog, today
    ):
        course = catalog.create_course(1, "A")
        catalog.enroll(USER_ID, course, progress=100)
        assignment = catalog.create_assignment(course, "Essay")
        for _ in range(2):
            submission = catalog.submit_assignment(assignment, USER_ID)
            catalog.grade_submission(submission, 75)
        activity_repo.add(USER_ID, today, hours_spent=3)

        unlocked = achievement_engine.evaluate_unlocks(USER_ID)

        assert sorted(unlocked) == ["assignments_2", "courses_1", "hours_3"]

    def test_streak_and_perfect_exam_are_display_only(
        self, achievement_engine, activity_repo, catalog, exam_repo, db, today
    ):
        """Full progress on streak and perfect_exam never writes an unlock."""
        for offset in range(3):
            activity_repo.add(USER_ID, today - timedelta(days=offset), hours_spent=1)

        course = catalog.create_course(1, "A")
        exam = catalog.create_exam(course, "Quiz")
        question = catalog.add_question(exam, "2+2?", "4", points=10)
        attempt = exam_repo.create_attempt(exam, USER_ID, "2026-03-11T09:00:00+00:00")
        exam_repo.complete_attempt(
            attempt.id,
            [AnswerRecord(question_id=question, answer="4", is_correct=True)],
            score=10,
            total_points=10,
            completed_at="2026-03-11T09:10:00+00:00",
        )

        unlocked = achievement_engine.evaluate_unlocks(USER_ID)
        statuses = achievement_engine.list_achievements(USER_ID)

        assert "streak_3" not in unlocked
        assert "perfect_exam" not in unlocked
        assert _status(statuses, "streak_3").progress == 100
        assert _status(statuses, "streak_3").unlocked is False
        assert _status(statuses, "perfect_exam").progress == 100
        assert _status(statuses, "perfect_exam").unlocked is False
        assert [r["achievement_type"] for r in _unlock_rows(db, USER_ID)] == ["hours_3"]

    def test_unlocks_are_per_user(self, achievement_engine, activity_repo, today):
        activity_repo.add(USER_ID, today, lessons_completed=5)
        achievement_engine.evaluate_unlocks(USER_ID)

        other = achievement_engine.list_achievements(USER_ID + 1)
        assert _status(other, "lessons_5").unlocked is False


class TestActivityPipeline:
    """Tests for ledger write followed by unlock projection."""

    def test_log_reports_new_unlocks(self, pipeline):
        first = pipeline.log(USER_ID, ActivityDeltas(lessons_completed=3))
        second = pipeline.log(USER_ID, ActivityDeltas(lessons_completed=2, hours_spent=0.5))

        assert first.unlocked == []
        assert second.unlocked == ["lessons_5"]
        assert second.record.lessons_completed == 5
        assert second.record.hours_spent == 0.5

    def test_steps_can_run_separately(self, pipeline):
        pipeline.record(USER_ID, ActivityDeltas(hours_spent=3))

        assert pipeline.project(USER_ID) == ["hours_3"]
        assert pipeline.project(USER_ID) == []

"""Tests for the additive activity ledger."""

from datetime import timedelta

import pytest

from eduprogress.core.activity_ledger import ActivityDeltas, ActivityLedger
from eduprogress.core.errors import ValidationError


@pytest.fixture
def ledger(activity_repo, clock) -> ActivityLedger:
    return ActivityLedger(activity_repo, today=clock)


class TestLogActivity:
    """Tests for ActivityLedger.log_activity."""

    def test_first_log_creates_record(self, ledger, today):
        record = ledger.log_activity(1, ActivityDeltas(hours_spent=1.5, lessons_completed=2))

        assert record.user_id == 1
        assert record.activity_date == today.isoformat()
        assert record.hours_spent == 1.5
        assert record.lessons_completed == 2
        assert record.assignments_completed == 0
        assert record.exams_taken == 0

    def test_same_day_accumulates(self, ledger):
        ledger.log_activity(1, ActivityDeltas(hours_spent=1.5))
        record = ledger.log_activity(1, ActivityDeltas(hours_spent=0.5, lessons_completed=1))

        assert record.hours_spent == 2.0
        assert record.lessons_completed == 1

    def test_omitted_fields_change_nothing(self, ledger):
        ledger.log_activity(1, ActivityDeltas(lessons_completed=3, exams_taken=1))
        record = ledger.log_activity(1, ActivityDeltas())

        assert record.lessons_completed == 3
        assert record.exams_taken == 1
        assert record.hours_spent == 0

    def test_one_record_per_user_and_date(self, ledger, db):
        for _ in range(3):
            ledger.log_activity(1, ActivityDeltas(lessons_completed=1))

        with db.connect() as conn:
            rows = conn.execute("SELECT * FROM user_activity WHERE user_id = 1").fetchall()
        assert len(rows) == 1
        assert rows[0]["lessons_completed"] == 3

    def test_dates_are_separate(self, ledger, today):
        yesterday = today - timedelta(days=1)
        ledger.log_activity(1, ActivityDeltas(hours_spent=1), activity_date=yesterday)
        ledger.log_activity(1, ActivityDeltas(hours_spent=2))

        assert ledger.get_record(1, yesterday).hours_spent == 1
        assert ledger.get_record(1, today).hours_spent == 2

    def test_users_are_separate(self, ledger, today):
        ledger.log_activity(1, ActivityDeltas(lessons_completed=1))
        ledger.log_activity(2, ActivityDeltas(lessons_completed=5))

        assert ledger.get_record(1, today).lessons_completed == 1
        assert ledger.get_record(2, today).lessons_completed == 5

    def test_get_record_missing(self, ledger, today):
        assert ledger.get_record(1, today) is None

    @pytest.mark.parametrize(
        "field_name",
        ["hours_spent", "lessons_completed", "assignments_completed", "exams_taken"],
    )
    def test_negative_delta_rejected(self, ledger, today, field_name):
        with pytest.raises(ValidationError, match=field_name):
            ledger.log_activity(1, ActivityDeltas(**{field_name: -1}))

        assert ledger.get_record(1, today) is None


class TestActivityRepositoryReads:
    """Tests for the aggregate reads the engines build on."""

    def test_totals_over_all_dates(self, activity_repo, today):
        activity_repo.add(1, today, hours_spent=1.25, lessons_completed=2)
        activity_repo.add(1, today - timedelta(days=30), hours_spent=2, assignments_completed=1)

        totals = activity_repo.totals(1)

        assert totals.hours_spent == 3.25
        assert totals.lessons_completed == 2
        assert totals.assignments_completed == 1

    def test_totals_since(self, activity_repo, today):
        activity_repo.add(1, today, lessons_completed=2)
        activity_repo.add(1, today - timedelta(days=30), lessons_completed=5)

        assert activity_repo.totals(1, since=today - timedelta(days=7)).lessons_completed == 2

    def test_totals_without_records(self, activity_repo):
        totals = activity_repo.totals(1)

        assert totals.hours_spent == 0
        assert totals.lessons_completed == 0

    def test_active_dates_most_recent_first(self, activity_repo, today):
        activity_repo.add(1, today - timedelta(days=2), lessons_completed=1)
        activity_repo.add(1, today, hours_spent=0.5)
        activity_repo.add(1, today - timedelta(days=1), hours_spent=1)

        assert activity_repo.active_dates(1) == [
            today,
            today - timedelta(days=1),
            today - timedelta(days=2),
        ]

    def test_active_dates_ignore_exam_only_days(self, activity_repo, today):
        """Only hours or lessons make a day count."""
        activity_repo.add(1, today, exams_taken=1, assignments_completed=1)

        assert activity_repo.active_dates(1) == []

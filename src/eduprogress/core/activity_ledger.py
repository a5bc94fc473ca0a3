"""Additive daily activity ledger.

One record per (user, date). Logging the same date again adds to the
existing counters; nothing ever overwrites or decreases them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import structlog

from eduprogress.core.errors import ValidationError
from eduprogress.db.activity_repository import ActivityRecord, ActivityRepository
from eduprogress.utils.dates import Clock, utc_today

logger = structlog.get_logger(__name__)


@dataclass
class ActivityDeltas:
    """Increments for one logged activity event."""

    hours_spent: float = 0.0
    lessons_completed: int = 0
    assignments_completed: int = 0
    exams_taken: int = 0

    def validate(self) -> None:
        """Reject negative increments.

        Raises:
            ValidationError: If any field is below zero
        """
        for name in ("hours_spent", "lessons_completed", "assignments_completed", "exams_taken"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} must be >= 0")


class ActivityLedger:
    """Write path into ``user_activity``."""

    def __init__(self, activity: ActivityRepository, today: Clock = utc_today) -> None:
        self._activity = activity
        self._today = today

    def log_activity(
        self,
        user_id: int,
        deltas: ActivityDeltas,
        activity_date: date | None = None,
    ) -> ActivityRecord:
        """Accumulate deltas into the user's record for a date.

        Args:
            user_id: User the activity belongs to
            deltas: Increments; omitted fields are zero
            activity_date: Calendar date, defaults to today

        Returns:
            The record after accumulation

        Raises:
            ValidationError: If a delta is negative
        """
        deltas.validate()
        day = activity_date or self._today()

        record = self._activity.add(
            user_id,
            day,
            hours_spent=deltas.hours_spent,
            lessons_completed=deltas.lessons_completed,
            assignments_completed=deltas.assignments_completed,
            exams_taken=deltas.exams_taken,
        )

        logger.info(
            "activity.logged",
            user_id=user_id,
            activity_date=day.isoformat(),
            hours_spent=record.hours_spent,
            lessons_completed=record.lessons_completed,
        )
        return record

    def get_record(self, user_id: int, activity_date: date) -> ActivityRecord | None:
        return self._activity.get(user_id, activity_date)

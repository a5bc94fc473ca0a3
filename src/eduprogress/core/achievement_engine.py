"""Achievement and streak engine.

Everything here is recomputed from storage on each call. The engine keeps no
state of its own besides the unlock rows it writes.

Two paths use the same aggregates:

- ``list_achievements`` (read API): every definition with its progress
  percentage, including streak and perfect_exam.
- ``evaluate_unlocks`` (after each ledger write): persists unlocks, but only
  for the ``UNLOCKABLE_TYPES``. Streak and perfect_exam achievements are
  display-only and are never written as unlocked by this path.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

import structlog

from eduprogress.config.achievements import AchievementDefinition
from eduprogress.db.achievements_repository import AchievementRepository
from eduprogress.db.activity_repository import ActivityRepository
from eduprogress.db.exams_repository import ExamRepository
from eduprogress.db.progress_repository import ProgressRepository
from eduprogress.utils.dates import Clock, round_half_up, utc_now_iso, utc_today

logger = structlog.get_logger(__name__)

UNLOCKABLE_TYPES = frozenset({"lessons", "courses", "hours", "assignments"})


@dataclass
class AchievementStats:
    """Aggregates an achievement threshold can be measured against."""

    lessons_completed: int = 0
    courses_completed: int = 0
    total_hours: float = 0.0
    assignments_completed: int = 0
    streak: int = 0
    perfect_exam: bool = False

    def value_for(self, requirement_type: str) -> float | None:
        """Current value for a ratio-based requirement type."""
        return {
            "lessons": self.lessons_completed,
            "courses": self.courses_completed,
            "hours": self.total_hours,
            "assignments": self.assignments_completed,
            "streak": self.streak,
        }.get(requirement_type)


@dataclass
class AchievementStatus:
    """A definition joined with one user's state."""

    definition: AchievementDefinition
    unlocked: bool
    unlocked_at: str | None
    progress: int

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.definition.to_dict(),
            "unlocked": self.unlocked,
            "unlocked_at": self.unlocked_at,
            "progress": self.progress,
        }


def compute_streak(active_dates: Iterable[date], today: date) -> int:
    """Count consecutive qualifying days ending today or yesterday.

    Walks the dates most recent first. Each date must be at most one day
    before the previous one (or before ``today`` for the first); the walk
    stops at the first larger gap and never resumes.

    Args:
        active_dates: Qualifying dates, sorted descending
        today: Evaluation date
    """
    streak = 0
    check_date = today
    for activity_date in active_dates:
        diff = (check_date - activity_date).days
        if diff <= 1:
            streak += 1
            check_date = activity_date
        else:
            break
    return streak


def compute_progress(definition: AchievementDefinition, stats: AchievementStats) -> int:
    """Progress percentage (0-100) toward one achievement."""
    if definition.requirement_type == "perfect_exam":
        return 100 if stats.perfect_exam else 0

    current = stats.value_for(definition.requirement_type)
    if current is None:
        return 0
    if definition.requirement_value <= 0:
        return 100

    ratio = min(100.0, 100 * current / definition.requirement_value)
    return int(round_half_up(max(0.0, ratio)))


def meets_requirement(definition: AchievementDefinition, stats: AchievementStats) -> bool:
    """Threshold check used by the unlock path."""
    if definition.requirement_type not in UNLOCKABLE_TYPES:
        return False
    current = stats.value_for(definition.requirement_type)
    return current is not None and current >= definition.requirement_value


class AchievementEngine:
    """Derive achievement state from the ledger, enrollments and exams."""

    def __init__(
        self,
        achievements: AchievementRepository,
        activity: ActivityRepository,
        progress: ProgressRepository,
        exams: ExamRepository,
        today: Clock = utc_today,
    ) -> None:
        self._achievements = achievements
        self._activity = activity
        self._progress = progress
        self._exams = exams
        self._today = today

    def compute_stats(self, user_id: int) -> AchievementStats:
        """Fresh aggregates for one user."""
        totals = self._activity.totals(user_id)
        return AchievementStats(
            lessons_completed=totals.lessons_completed,
            courses_completed=self._progress.count_completed_courses(user_id),
            total_hours=totals.hours_spent,
            assignments_completed=self._progress.count_graded_submissions(user_id),
            streak=compute_streak(self._activity.active_dates(user_id), self._today()),
            perfect_exam=self._exams.has_perfect_attempt(user_id),
        )

    def list_achievements(self, user_id: int) -> list[AchievementStatus]:
        """Every definition with the user's unlock state and progress."""
        stats = self.compute_stats(user_id)
        unlocks = self._achievements.list_unlocks(user_id)

        statuses = []
        for definition in self._achievements.list_definitions():
            unlock = unlocks.get(definition.type)
            statuses.append(
                AchievementStatus(
                    definition=definition,
                    unlocked=unlock is not None,
                    unlocked_at=unlock.unlocked_at if unlock else None,
                    progress=compute_progress(definition, stats),
                )
            )
        return statuses

    def evaluate_unlocks(self, user_id: int) -> list[str]:
        """Persist unlocks for every threshold the user now meets.

        Idempotent: an existing unlock is never rewritten or removed.

        Returns:
            Achievement types unlocked by this call
        """
        stats = self.compute_stats(user_id)
        unlocked_at = utc_now_iso()

        newly_unlocked = []
        for definition in self._achievements.list_definitions():
            if not meets_requirement(definition, stats):
                continue
            if self._achievements.insert_unlock(user_id, definition.type, unlocked_at):
                newly_unlocked.append(definition.type)

        if newly_unlocked:
            logger.info("achievements.unlocked", user_id=user_id, types=newly_unlocked)
        return newly_unlocked

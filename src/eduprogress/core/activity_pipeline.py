"""Activity logging pipeline: ledger write, then achievement projection.

The two steps are separate calls so the projection can be run (or tested)
on its own, e.g. after a bulk import into the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

import structlog

from eduprogress.core.achievement_engine import AchievementEngine
from eduprogress.core.activity_ledger import ActivityDeltas, ActivityLedger
from eduprogress.db.activity_repository import ActivityRecord

logger = structlog.get_logger(__name__)


@dataclass
class ActivityLogResult:
    """What one logged activity event changed."""

    record: ActivityRecord
    unlocked: list[str] = field(default_factory=list)


class ActivityPipeline:
    """Run a ledger write followed by the unlock projection."""

    def __init__(self, ledger: ActivityLedger, achievements: AchievementEngine) -> None:
        self.ledger = ledger
        self.achievements = achievements

    def record(
        self,
        user_id: int,
        deltas: ActivityDeltas,
        activity_date: date | None = None,
    ) -> ActivityRecord:
        """Step 1: accumulate into the ledger."""
        return self.ledger.log_activity(user_id, deltas, activity_date)

    def project(self, user_id: int) -> list[str]:
        """Step 2: recompute unlocks from current aggregates."""
        return self.achievements.evaluate_unlocks(user_id)

    def log(
        self,
        user_id: int,
        deltas: ActivityDeltas,
        activity_date: date | None = None,
    ) -> ActivityLogResult:
        record = self.record(user_id, deltas, activity_date)
        unlocked = self.project(user_id)

        logger.debug("activity_pipeline.completed", user_id=user_id, unlocked=unlocked)
        return ActivityLogResult(record=record, unlocked=unlocked)

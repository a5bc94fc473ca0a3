"""Fixtures for achievement tests."""

import pytest

from eduprogress.config.achievements import AchievementDefinition
from eduprogress.core.achievement_engine import AchievementEngine
from eduprogress.core.activity_ledger import ActivityLedger
from eduprogress.core.activity_pipeline import ActivityPipeline


@pytest.fixture
def definitions() -> list[AchievementDefinition]:
    """Small catalog covering every requirement type."""
    return [
        AchievementDefinition("lessons_5", "Five Lessons", "lessons", 5),
        AchievementDefinition("courses_1", "First Course", "courses", 1),
        AchievementDefinition("hours_3", "Three Hours", "hours", 3),
        AchievementDefinition("assignments_2", "Two Assignments", "assignments", 2),
        AchievementDefinition("streak_3", "Three Day Streak", "streak", 3),
        AchievementDefinition("perfect_exam", "Perfect Score", "perfect_exam", 1),
    ]


@pytest.fixture
def seeded(achievement_repo, definitions):
    achievement_repo.seed_definitions(definitions)
    return definitions


@pytest.fixture
def achievement_engine(
    seeded, achievement_repo, activity_repo, progress_repo, exam_repo, clock
) -> AchievementEngine:
    return AchievementEngine(
        achievements=achievement_repo,
        activity=activity_repo,
        progress=progress_repo,
        exams=exam_repo,
        today=clock,
    )


@pytest.fixture
def pipeline(achievement_engine, activity_repo, clock) -> ActivityPipeline:
    return ActivityPipeline(ActivityLedger(activity_repo, today=clock), achievement_engine)

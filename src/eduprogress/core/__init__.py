"""Core business logic.

Modules:
- errors: error taxonomy mapped to HTTP statuses
- exam_engine: exam attempt lifecycle and scoring
- activity_ledger: additive per-day activity counters
- achievement_engine: streaks, progress and unlocks
- activity_pipeline: ledger write followed by unlock projection
- progress_aggregator: student/teacher dashboards
"""

__all__ = [
    "errors",
    "exam_engine",
    "activity_ledger",
    "achievement_engine",
    "activity_pipeline",
    "progress_aggregator",
]

"""Database module for SQLite persistence.

Provides:
- Database connection management and schema initialization
- One repository class per aggregate, each built on a ``Database``
"""

from eduprogress.db.achievements_repository import AchievementRepository
from eduprogress.db.activity_repository import ActivityRepository
from eduprogress.db.catalog_repository import CatalogRepository
from eduprogress.db.database import Database
from eduprogress.db.exams_repository import ExamRepository
from eduprogress.db.progress_repository import ProgressRepository

__all__ = [
    "AchievementRepository",
    "ActivityRepository",
    "CatalogRepository",
    "Database",
    "ExamRepository",
    "ProgressRepository",
]

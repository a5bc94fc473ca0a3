"""Shared fixtures: a fresh SQLite database per test and a frozen calendar."""

from datetime import date

import pytest

from eduprogress.config.app_config import clear_config_cache
from eduprogress.db import (
    AchievementRepository,
    ActivityRepository,
    CatalogRepository,
    Database,
    ExamRepository,
    ProgressRepository,
)

# A Wednesday
TODAY = date(2026, 3, 11)


@pytest.fixture(autouse=True)
def _reset_config_cache():
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock():
    """Clock pinned to TODAY."""
    return lambda: TODAY


@pytest.fixture
def db(tmp_path) -> Database:
    """Initialized database in a temp directory."""
    database = Database(tmp_path / "eduprogress.db")
    database.init_schema()
    return database


@pytest.fixture
def catalog(db) -> CatalogRepository:
    return CatalogRepository(db)


@pytest.fixture
def exam_repo(db) -> ExamRepository:
    return ExamRepository(db)


@pytest.fixture
def activity_repo(db) -> ActivityRepository:
    return ActivityRepository(db)


@pytest.fixture
def progress_repo(db) -> ProgressRepository:
    return ProgressRepository(db)


@pytest.fixture
def achievement_repo(db) -> AchievementRepository:
    return AchievementRepository(db)

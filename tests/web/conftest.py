"""Fixtures for Web API tests."""

import pytest
from fastapi.testclient import TestClient

from eduprogress.config.app_config import AppConfig, DatabaseConfig, ExamConfig
from eduprogress.db import CatalogRepository, Database
from eduprogress.web.api import create_app

ACHIEVEMENTS_YAML = """\
achievements:
  - type: lessons_5
    title: Five Lessons
    icon: book
    color: from-blue-500 to-cyan-500
    requirement_type: lessons
    requirement_value: 5
  - type: hours_2
    title: Two Hours
    requirement_type: hours
    requirement_value: 2
  - type: streak_7
    title: Week Streak
    requirement_type: streak
    requirement_value: 7
"""



@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    achievements_file = tmp_path / "achievements.yaml"
    achievements_file.write_text(ACHIEVEMENTS_YAML, encoding="utf-8")
    return AppConfig(
        database=DatabaseConfig(path=tmp_path / "api.db"),
        achievements_file=achievements_file,
    )


@pytest.fixture
def app(app_config, clock):
    return create_app(config=app_config, today=clock)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def web_catalog(app_config) -> CatalogRepository:
    """Catalog writer on the same database file as the app."""
    return CatalogRepository(Database(app_config.database.path))


@pytest.fixture
def exam_ids(web_catalog) -> dict:
    course_id = web_catalog.create_course(teacher_id=1, title="Basics")
    exam_id = web_catalog.create_exam(course_id, "Quiz 1", duration=20)
    return {
        "course_id": course_id,
        "exam_id": exam_id,
        "q_arith": web_catalog.add_question(exam_id, "2+2?", "4", points=10, options=["3", "4"]),
        "q_capital": web_catalog.add_question(exam_id, "Capital of France?", "Paris", points=5),
    }


@pytest.fixture
def strict_client(app_config, clock) -> TestClient:
    """Client for an app that allows one open attempt per exam."""
    app_config.exams = ExamConfig(single_open_attempt=True)
    return TestClient(create_app(config=app_config, today=clock))

"""Tests for the health endpoint and application-wide error handling."""

import pytest
from fastapi.testclient import TestClient

from eduprogress import __version__
from eduprogress.core.errors import StorageError
from eduprogress.db import Database
from eduprogress.web.api import create_app
from eduprogress.web.deps import get_database, get_exam_engine, get_progress_aggregator

STUDENT = {"X-User-Id": "7"}


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_returns_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == __version__
        assert data["database"] == "ok"
        assert data["schema_ready"] is True
        assert "T" in data["timestamp"]

    def test_empty_database_file(self, app, tmp_path):
        app.dependency_overrides[get_database] = lambda: Database(tmp_path / "empty.db")
        client = TestClient(app)

        data = client.get("/health").json()

        assert data["status"] == "ok"
        assert data["schema_ready"] is False

    def test_unreachable_database_is_degraded(self, app):
        app.dependency_overrides[get_database] = lambda: _UnreachableDatabase()
        client = TestClient(app)

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["database"] == "unavailable"
        assert data["schema_ready"] is False


class _UnreachableDatabase:
    path = "unreachable.db"

    def ping(self):
        raise StorageError("Storage unavailable")


class _BrokenEngine:
    def start_attempt(self, exam_id, student_id):
        raise StorageError("disk I/O error at /var/lib/secret.db")


class _CrashingAggregator:
    def student_stats(self, student_id):
        raise RuntimeError("boom")


class TestErrorHandling:
    """Domain errors map to status codes; internals never leak."""

    def test_storage_error_is_generic_500(self, app):
        app.dependency_overrides[get_exam_engine] = lambda: _BrokenEngine()
        client = TestClient(app)

        response = client.post("/api/exams/1/start", headers=STUDENT)

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
        assert "secret" not in response.text

    def test_unexpected_error_is_500(self, app):
        app.dependency_overrides[get_progress_aggregator] = lambda: _CrashingAggregator()
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/api/dashboard/stats/student", headers=STUDENT)

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}

    @pytest.mark.parametrize("path", ["/api/exams/abc", "/api/exams/attempts/abc"])
    def test_bad_path_parameter_is_400(self, client, path):
        response = client.get(path, headers=STUDENT)
        assert response.status_code == 400


class TestAppSetup:
    """Tests for create_app."""

    def test_schema_and_definitions_ready(self, client):
        response = client.get("/api/dashboard/achievements", headers=STUDENT)
        assert len(response.json()) == 3

    def test_second_app_on_same_database(self, app_config, clock, client):
        """Re-seeding on startup keeps one row per definition."""
        second = TestClient(create_app(config=app_config, today=clock))
        response = second.get("/api/dashboard/achievements", headers=STUDENT)

        assert len(response.json()) == 3

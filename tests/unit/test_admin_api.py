"""
Unit Tests for the Admin and Health Routers
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from learnloop.config import settings
from learnloop.db.base import get_db
from learnloop.main import app
from learnloop.models.digest import BatchResult

BATCH = BatchResult(
    success=True,
    users_processed=3,
    digests_created=2,
    skipped=1,
    failed=0,
    message="Generated digests for 3 users: 2 created, 1 skipped, 0 failed",
)


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAdminDigests:
    def test_generate_digests(self, client: TestClient) -> None:
        with patch(
            "learnloop.routers.admin.generate_weekly_digests_for_all_users",
            AsyncMock(return_value=BATCH),
        ) as batch:
            response = client.post("/api/admin/generate-digests")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "usersProcessed": 3,
            "digestsCreated": 2,
            "skipped": 1,
            "failed": 0,
            "message": BATCH.message,
        }
        batch.assert_awaited_once_with(generator=None)

    def test_api_key_required_when_configured(self, client: TestClient) -> None:
        with patch.object(settings, "ADMIN_API_KEY", "admin-secret"), patch(
            "learnloop.routers.admin.generate_weekly_digests_for_all_users",
            AsyncMock(return_value=BATCH),
        ) as batch:
            missing = client.post("/api/admin/generate-digests")
            wrong = client.post(
                "/api/admin/generate-digests", headers={"X-API-Key": "guess"}
            )
            right = client.post(
                "/api/admin/generate-digests", headers={"X-API-Key": "admin-secret"}
            )

        assert missing.status_code == 401
        assert wrong.status_code == 401
        assert right.status_code == 200
        batch.assert_awaited_once()

    def test_list_jobs(self, client: TestClient) -> None:
        jobs = [
            {
                "id": "weekly_digests",
                "name": "Weekly Learning Digests",
                "next_run": "2026-10-18T23:00:00+00:00",
                "trigger": "cron[day_of_week='sun', hour='23', minute='0']",
            }
        ]
        with patch("learnloop.routers.admin.get_scheduled_jobs", return_value=jobs):
            response = client.get("/api/admin/jobs")

        assert response.json() == {"jobs": jobs}


class TestHealth:
    def test_basic(self, client: TestClient) -> None:
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "LearnLoop"}

    def test_detailed_all_healthy(
        self, client: TestClient, mock_db_session, mock_redis
    ) -> None:
        app.dependency_overrides[get_db] = lambda: mock_db_session

        with patch(
            "learnloop.routers.health.get_redis", AsyncMock(return_value=mock_redis)
        ):
            data = client.get("/api/health/detailed").json()

        assert data["status"] == "healthy"
        assert data["dependencies"]["postgres"] == {"status": "healthy"}
        assert data["dependencies"]["redis"] == {"status": "healthy"}
        assert data["dependencies"]["scheduler"]["status"] == "stopped"
        assert data["dependencies"]["scheduler"]["enabled"] is False

    def test_detailed_degraded(
        self, client: TestClient, mock_db_session, mock_redis
    ) -> None:
        mock_db_session.execute.side_effect = ConnectionError("connection refused")
        app.dependency_overrides[get_db] = lambda: mock_db_session

        with patch(
            "learnloop.routers.health.get_redis", AsyncMock(return_value=mock_redis)
        ):
            data = client.get("/api/health/detailed").json()

        assert data["status"] == "degraded"
        assert data["dependencies"]["postgres"]["status"] == "unhealthy"
        assert "connection refused" in data["dependencies"]["postgres"]["error"]
        assert data["dependencies"]["redis"]["status"] == "healthy"


def test_root(client: TestClient) -> None:
    assert client.get("/").json()["message"] == "LearnLoop API"

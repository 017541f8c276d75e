# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for health endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient


class TestHealth:
    """Tests for /health, /health/live and /health/ready."""

    def test_live(self, client: TestClient) -> None:
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    @patch("academy.api.routes.health.check_database_connection", new_callable=AsyncMock)
    def test_degraded_without_redis(self, mock_db_check: AsyncMock, client: TestClient) -> None:
        mock_db_check.return_value = True

        with patch("academy.api.routes.health.get_redis_optional", return_value=None):
            response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["components"]["database"]["status"] == "healthy"
        assert body["components"]["redis"]["status"] == "degraded"

    @patch("academy.api.routes.health.check_database_connection", new_callable=AsyncMock)
    def test_all_healthy(self, mock_db_check: AsyncMock, client: TestClient) -> None:
        mock_db_check.return_value = True
        redis = MagicMock()
        redis.ping = AsyncMock(return_value=True)
        scheduler = MagicMock(is_running=True)

        with patch(
            "academy.api.routes.health.get_redis_optional", return_value=redis
        ), patch("academy.api.routes.health.get_scheduler", return_value=scheduler):
            response = client.get("/health")

        assert response.json()["status"] == "healthy"

    @patch("academy.api.routes.health.check_database_connection", new_callable=AsyncMock)
    def test_database_down(self, mock_db_check: AsyncMock, client: TestClient) -> None:
        mock_db_check.return_value = False

        health = client.get("/health").json()
        ready = client.get("/health/ready").json()

        assert health["status"] == "unhealthy"
        assert ready["ready"] is False

    @patch("academy.api.routes.health.check_database_connection", new_callable=AsyncMock)
    def test_ready(self, mock_db_check: AsyncMock, client: TestClient) -> None:
        mock_db_check.return_value = True

        response = client.get("/health/ready")

        assert response.json()["ready"] is True
        assert response.json()["checks"]["database"]["status"] == "healthy"

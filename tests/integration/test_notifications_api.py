# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for notification endpoints."""

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from academy.api.dependencies import get_notification_service
from academy.domains.auth.roles import AppRole
from academy.domains.notifications import (
    EmailServiceUnavailableError,
    MissingEmailFieldsError,
    NotificationService,
)
from academy.models.notifications import EmailSentResponse

ADMIN_ID = "550e8400-e29b-41d4-a716-446655440601"

PAYLOAD = {
    "to": "ada@example.com",
    "studentName": "Ada",
    "status": "approved",
    "grantedPercentage": 50,
    "programName": "Cloud Computing",
}


@pytest.fixture
def notification_service(app: FastAPI) -> MagicMock:
    service = MagicMock(spec=NotificationService)
    service.send_scholarship_email = AsyncMock(return_value=EmailSentResponse(id="msg_1"))
    app.dependency_overrides[get_notification_service] = lambda: service
    return service


class TestScholarshipEmail:
    """Tests for POST /api/v1/notifications/scholarship-email."""

    def test_sends(
        self,
        client: TestClient,
        notification_service: MagicMock,
        auth_headers: Callable[..., dict[str, str]],
    ) -> None:
        response = client.post(
            "/api/v1/notifications/scholarship-email",
            json=PAYLOAD,
            headers=auth_headers(ADMIN_ID, AppRole.ADMIN),
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "id": "msg_1"}
        sent = notification_service.send_scholarship_email.await_args.args[0]
        assert sent.student_name == "Ada"
        assert sent.granted_percentage == 50

    def test_accountant_forbidden(
        self,
        client: TestClient,
        notification_service: MagicMock,
        auth_headers: Callable[..., dict[str, str]],
    ) -> None:
        response = client.post(
            "/api/v1/notifications/scholarship-email",
            json=PAYLOAD,
            headers=auth_headers(ADMIN_ID, AppRole.ACCOUNTANT),
        )

        assert response.status_code == 403
        notification_service.send_scholarship_email.assert_not_awaited()

    def test_missing_fields(
        self,
        client: TestClient,
        notification_service: MagicMock,
        auth_headers: Callable[..., dict[str, str]],
    ) -> None:
        notification_service.send_scholarship_email.side_effect = MissingEmailFieldsError(
            "Missing required fields: to, studentName, status, programName"
        )

        response = client.post(
            "/api/v1/notifications/scholarship-email",
            json={"to": "ada@example.com"},
            headers=auth_headers(ADMIN_ID, AppRole.ADMIN),
        )

        assert response.status_code == 400

    def test_provider_details_returned(
        self,
        client: TestClient,
        notification_service: MagicMock,
        auth_headers: Callable[..., dict[str, str]],
    ) -> None:
        notification_service.send_scholarship_email.side_effect = EmailServiceUnavailableError(
            "Failed to send email", details={"message": "Invalid `to` field"}
        )

        response = client.post(
            "/api/v1/notifications/scholarship-email",
            json=PAYLOAD,
            headers=auth_headers(ADMIN_ID, AppRole.ADMIN),
        )

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to send email",
            "details": {"message": "Invalid `to` field"},
        }

    def test_not_configured(
        self,
        client: TestClient,
        notification_service: MagicMock,
        auth_headers: Callable[..., dict[str, str]],
    ) -> None:
        notification_service.send_scholarship_email.side_effect = EmailServiceUnavailableError(
            "RESEND_API_KEY is not configured"
        )

        response = client.post(
            "/api/v1/notifications/scholarship-email",
            json=PAYLOAD,
            headers=auth_headers(ADMIN_ID, AppRole.ADMIN),
        )

        assert response.status_code == 500
        assert response.json() == {"error": "RESEND_API_KEY is not configured"}

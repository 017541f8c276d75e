# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for scholarship emails: templates, email client and service."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from academy.core.config.settings import EmailSettings
from academy.domains.notifications import (
    EmailServiceUnavailableError,
    MissingEmailFieldsError,
    NotificationService,
)
from academy.domains.notifications.templates import (
    render_approved,
    render_rejected,
    render_scholarship_email,
)
from academy.infrastructure.notifications import (
    EmailClient,
    EmailDeliveryError,
    EmailNotConfiguredError,
)
from academy.models.notifications import ScholarshipEmailRequest


class TestTemplates:
    """Tests for email rendering."""

    def test_approved_subject_and_percentage(self) -> None:
        email = render_approved("Ada", "Data Science", 50, None, "Acme Academy")

        assert email.subject == "Scholarship Approved: Data Science"
        assert "Congratulations!" in email.html
        assert "50%" in email.html
        assert "50.0%" not in email.html
        assert "Acme Academy" in email.html

    def test_approved_fractional_percentage(self) -> None:
        email = render_approved("Ada", "Data Science", 37.5, None, "Acme Academy")
        assert "37.5%" in email.html

    def test_rejected_with_notes(self) -> None:
        email = render_rejected("Ada", "Data Science", "Apply next cohort", "Acme Academy")

        assert email.subject == "Scholarship Application Update: Data Science"
        assert "Reviewer's Note:" in email.html
        assert "Apply next cohort" in email.html

    def test_rejected_without_notes(self) -> None:
        email = render_rejected("Ada", "Data Science", None, "Acme Academy")
        assert "Reviewer's Note:" not in email.html

    def test_user_values_escaped(self) -> None:
        email = render_approved(
            "<script>alert(1)</script>", "Data & AI", 100, "<b>hi</b>", "Acme"
        )

        assert "<script>" not in email.html
        assert "&lt;script&gt;" in email.html
        assert "Data &amp; AI" in email.html
        assert "<b>hi</b>" not in email.html

    def test_non_approved_status_uses_rejected(self) -> None:
        email = render_scholarship_email(
            status="rejected",
            student_name="Ada",
            program_name="Networking",
            granted_percentage=None,
            admin_notes=None,
            academy_name="Acme",
        )
        assert email.subject.startswith("Scholarship Application Update")


class TestEmailClient:
    """Tests for the Resend HTTP client."""

    @pytest.mark.asyncio
    async def test_send(self, email_settings: EmailSettings) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "msg_123"})

        client = EmailClient(
            email_settings,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        message_id = await client.send("ada@example.com", "Hello", "<p>Hi</p>")

        assert message_id == "msg_123"
        assert seen[0].headers["Authorization"] == "Bearer re_test_key"
        body = json.loads(seen[0].content)
        assert body["to"] == ["ada@example.com"]
        assert body["from"] == email_settings.from_address

    @pytest.mark.asyncio
    async def test_not_configured(self) -> None:
        client = EmailClient(EmailSettings(api_key=None))

        with pytest.raises(EmailNotConfiguredError):
            await client.send("ada@example.com", "Hello", "<p>Hi</p>")

    @pytest.mark.asyncio
    async def test_rejected_carries_details(self, email_settings: EmailSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"name": "validation_error", "message": "Invalid `to`"})

        client = EmailClient(
            email_settings,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(EmailDeliveryError) as exc_info:
            await client.send("bad", "Hello", "<p>Hi</p>")

        assert exc_info.value.details == {"name": "validation_error", "message": "Invalid `to`"}


class TestNotificationService:
    """Tests for NotificationService."""

    @pytest.fixture
    def email_client(self) -> MagicMock:
        client = MagicMock(spec=EmailClient)
        client.send = AsyncMock(return_value="msg_1")
        return client

    @pytest.fixture
    def request_body(self) -> ScholarshipEmailRequest:
        return ScholarshipEmailRequest.model_validate({
            "to": "ada@example.com",
            "studentName": "Ada",
            "status": "approved",
            "grantedPercentage": 75,
            "programName": "Cloud Computing",
        })

    @pytest.mark.asyncio
    async def test_sends(self, email_client: MagicMock, request_body: ScholarshipEmailRequest) -> None:
        service = NotificationService(email_client, "Acme")

        response = await service.send_scholarship_email(request_body)

        assert response.success is True
        assert response.id == "msg_1"
        to, subject, html = email_client.send.await_args.args
        assert to == "ada@example.com"
        assert subject == "Scholarship Approved: Cloud Computing"
        assert "75%" in html

    @pytest.mark.asyncio
    async def test_missing_fields(self, email_client: MagicMock) -> None:
        service = NotificationService(email_client, "Acme")

        with pytest.raises(MissingEmailFieldsError):
            await service.send_scholarship_email(
                ScholarshipEmailRequest(to="ada@example.com", status="approved")
            )

        email_client.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_configured(
        self,
        email_client: MagicMock,
        request_body: ScholarshipEmailRequest,
    ) -> None:
        email_client.send.side_effect = EmailNotConfiguredError()
        service = NotificationService(email_client, "Acme")

        with pytest.raises(EmailServiceUnavailableError) as exc_info:
            await service.send_scholarship_email(request_body)

        assert str(exc_info.value) == "RESEND_API_KEY is not configured"
        assert exc_info.value.details is None

    @pytest.mark.asyncio
    async def test_delivery_failure_keeps_details(
        self,
        email_client: MagicMock,
        request_body: ScholarshipEmailRequest,
    ) -> None:
        email_client.send.side_effect = EmailDeliveryError(
            "Failed to send email", details={"message": "quota"}
        )
        service = NotificationService(email_client, "Acme")

        with pytest.raises(EmailServiceUnavailableError) as exc_info:
            await service.send_scholarship_email(request_body)

        assert exc_info.value.details == {"message": "quota"}

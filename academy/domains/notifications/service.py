# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification service for scholarship decisions."""

from __future__ import annotations

import logging
from typing import Any

from academy.domains.notifications.templates import render_scholarship_email
from academy.infrastructure.notifications import (
    EmailClient,
    EmailDeliveryError,
    EmailNotConfiguredError,
)
from academy.models.notifications import EmailSentResponse, ScholarshipEmailRequest

logger = logging.getLogger(__name__)


class NotificationServiceError(Exception):
    """Base exception for notification errors."""

    pass


class MissingEmailFieldsError(NotificationServiceError):
    """Raised when the request lacks a recipient or template field."""

    pass


class EmailServiceUnavailableError(NotificationServiceError):
    """Raised when the email API is not configured or rejects the message.

    Attributes:
        details: Provider response body, if any.
    """

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.details = details


class NotificationService:
    """Composes and sends scholarship decision emails."""

    def __init__(self, email_client: EmailClient, academy_name: str) -> None:
        self.email_client = email_client
        self.academy_name = academy_name

    async def send_scholarship_email(self, request: ScholarshipEmailRequest) -> EmailSentResponse:
        """Render and send one decision email.

        Raises:
            MissingEmailFieldsError: If to, studentName, status or programName is missing.
            EmailServiceUnavailableError: If delivery fails.
        """
        if not (request.to and request.student_name and request.status and request.program_name):
            raise MissingEmailFieldsError(
                "Missing required fields: to, studentName, status, programName"
            )

        rendered = render_scholarship_email(
            status=request.status,
            student_name=request.student_name,
            program_name=request.program_name,
            granted_percentage=request.granted_percentage,
            admin_notes=request.admin_notes,
            academy_name=self.academy_name,
        )

        try:
            message_id = await self.email_client.send(request.to, rendered.subject, rendered.html)
        except EmailNotConfiguredError as e:
            logger.error("Scholarship email not sent: %s", e)
            raise EmailServiceUnavailableError(e.message) from e
        except EmailDeliveryError as e:
            raise EmailServiceUnavailableError(e.message, details=e.details) from e

        logger.info("Scholarship email sent: status=%s, id=%s", request.status, message_id)
        return EmailSentResponse(id=message_id)

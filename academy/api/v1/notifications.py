# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification endpoints.

This module provides:
- POST /scholarship-email - Send a scholarship decision to a student
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from academy.api.dependencies import AdminUser, get_notification_service
from academy.api.errors import error_body
from academy.domains.notifications import (
    EmailServiceUnavailableError,
    MissingEmailFieldsError,
    NotificationService,
)
from academy.models.notifications import EmailSentResponse, ScholarshipEmailRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/scholarship-email",
    response_model=EmailSentResponse,
    summary="Send scholarship decision email",
    responses={
        400: {"description": "Missing fields"},
        401: {"description": "Not authenticated"},
        403: {"description": "Admin role required"},
        500: {"description": "Email API not configured or rejected the message"},
    },
)
async def send_scholarship_email(
    body: ScholarshipEmailRequest,
    caller: AdminUser,
    service: NotificationService = Depends(get_notification_service),
) -> EmailSentResponse:
    """Compose and send the approved or declined scholarship email."""
    try:
        return await service.send_scholarship_email(body)
    except MissingEmailFieldsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except EmailServiceUnavailableError as e:
        detail = error_body(str(e), details=e.details) if e.details is not None else str(e)
        logger.error("Scholarship email failed for caller %s: %s", caller.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

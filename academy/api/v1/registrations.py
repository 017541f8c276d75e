# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Registration endpoints.

This module provides:
- POST /public - Fields the enrollment completion page needs
- POST /{registration_id}/mark-paid - Accountant confirms an offline payment
- POST /cleanup - Sweep expired, unpaid registrations
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from academy.api.dependencies import (
    AccountantUser,
    AppSettings,
    CleanupCaller,
    get_registration_service,
)
from academy.domains.registrations import (
    InvalidRegistrationIdError,
    MissingRegistrationIdError,
    RegistrationNotFoundError,
    RegistrationService,
)
from academy.models.registrations import (
    CleanupResponse,
    MarkPaidResponse,
    PublicRegistrationRequest,
    PublicRegistrationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/public",
    response_model=PublicRegistrationResponse,
    summary="Public registration lookup",
    responses={
        400: {"description": "Missing or malformed registration id"},
        404: {"description": "Registration not found"},
    },
)
async def get_public_registration(
    body: PublicRegistrationRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> PublicRegistrationResponse:
    """Look up a registration by id without exposing private fields."""
    try:
        return await service.get_public_registration(body)
    except (MissingRegistrationIdError, InvalidRegistrationIdError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RegistrationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/{registration_id}/mark-paid",
    response_model=MarkPaidResponse,
    summary="Mark registration paid",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Accountant or admin role required"},
        404: {"description": "Registration not found"},
    },
)
async def mark_registration_paid(
    registration_id: str,
    caller: AccountantUser,
    service: RegistrationService = Depends(get_registration_service),
) -> MarkPaidResponse:
    """Record an offline payment."""
    try:
        return await service.mark_paid(registration_id, actor_id=caller.id)
    except RegistrationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/cleanup",
    response_model=CleanupResponse,
    summary="Delete expired registrations",
    responses={
        401: {"description": "Bearer token present but invalid"},
        403: {"description": "Caller is not an admin"},
    },
)
async def cleanup_expired_registrations(
    caller: CleanupCaller,
    settings: AppSettings,
    service: RegistrationService = Depends(get_registration_service),
) -> CleanupResponse:
    """Delete pending, unlinked registrations past the expiry window.

    Calls without a bearer token are treated as scheduled invocations.
    """
    result = await service.cleanup_expired_registrations(
        default_expiry_days=settings.cleanup.default_expiry_days,
    )
    logger.info(
        "Cleanup triggered by %s: deleted=%d",
        caller.id if caller else "schedule",
        result.records_deleted,
    )
    return CleanupResponse(
        records_deleted=result.records_deleted,
        deadline_days=result.deadline_days,
    )

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account provisioning endpoints.

This module provides:
- POST /bootstrap-admin - Create the first super admin (shared secret)
- POST /staff - Create a staff account (admin callers)
- POST /student-account - Create the login for a paid registration
- POST /staff-password - Reset a staff password (super admin callers)

The two endpoints reachable without a token are rate limited.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from academy.api.dependencies import AppSettings, AuthenticatedUser, get_provisioning_service
from academy.api.middleware.rate_limit import PROVISIONING_LIMIT, limiter
from academy.domains.provisioning import (
    AccountAlreadyCreatedError,
    IdentityOperationError,
    InsufficientRoleError,
    InvalidRoleError,
    InvalidSetupSecretError,
    InvalidUserIdError,
    MissingFieldsError,
    ProvisioningService,
    ProvisioningServiceError,
    RegistrationNotFoundError,
    RoleAssignmentError,
    SuperAdminExistsError,
    WeakPasswordError,
)
from academy.models.common import SuccessResponse
from academy.models.provisioning import (
    BootstrapAdminRequest,
    ChangeStaffPasswordRequest,
    CreateStaffRequest,
    CreateStudentAccountRequest,
    ProvisionedUserResponse,
    StudentAccountResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_BY_ERROR: dict[type[ProvisioningServiceError], int] = {
    MissingFieldsError: status.HTTP_400_BAD_REQUEST,
    WeakPasswordError: status.HTTP_400_BAD_REQUEST,
    InvalidRoleError: status.HTTP_400_BAD_REQUEST,
    InvalidUserIdError: status.HTTP_400_BAD_REQUEST,
    AccountAlreadyCreatedError: status.HTTP_400_BAD_REQUEST,
    InvalidSetupSecretError: status.HTTP_403_FORBIDDEN,
    InsufficientRoleError: status.HTTP_403_FORBIDDEN,
    RegistrationNotFoundError: status.HTTP_404_NOT_FOUND,
    SuperAdminExistsError: status.HTTP_409_CONFLICT,
    RoleAssignmentError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _to_http_error(error: ProvisioningServiceError) -> HTTPException:
    """Map a provisioning error to its HTTP status."""
    if isinstance(error, IdentityOperationError):
        return HTTPException(status_code=error.status_code, detail=str(error))
    code = _STATUS_BY_ERROR.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=code, detail=str(error))


@router.post(
    "/bootstrap-admin",
    response_model=ProvisionedUserResponse,
    summary="Bootstrap first super admin",
    responses={
        400: {"description": "Missing fields"},
        403: {"description": "Invalid setup secret"},
        409: {"description": "A super admin already exists"},
    },
)
@limiter.limit(PROVISIONING_LIMIT)
async def bootstrap_admin(
    request: Request,
    body: BootstrapAdminRequest,
    settings: AppSettings,
    service: ProvisioningService = Depends(get_provisioning_service),
) -> ProvisionedUserResponse:
    """Create the first super admin. Disabled once any super admin exists."""
    secret = settings.bootstrap.admin_secret
    try:
        return await service.bootstrap_admin(
            body,
            expected_secret=secret.get_secret_value() if secret else None,
        )
    except ProvisioningServiceError as e:
        raise _to_http_error(e)


@router.post(
    "/staff",
    response_model=ProvisionedUserResponse,
    summary="Create staff account",
    responses={
        400: {"description": "Missing fields or invalid role"},
        401: {"description": "Not authenticated"},
        403: {"description": "Caller may not grant this role"},
    },
)
async def create_staff(
    body: CreateStaffRequest,
    caller: AuthenticatedUser,
    service: ProvisioningService = Depends(get_provisioning_service),
) -> ProvisionedUserResponse:
    """Create a staff account and grant its role."""
    try:
        return await service.create_staff(body, caller_roles=caller.roles)
    except ProvisioningServiceError as e:
        logger.info("Staff creation rejected for caller %s: %s", caller.id, e)
        raise _to_http_error(e)


@router.post(
    "/student-account",
    response_model=StudentAccountResponse,
    summary="Create student login",
    responses={
        400: {"description": "Missing fields, weak password or already created"},
        404: {"description": "Registration not found"},
    },
)
@limiter.limit(PROVISIONING_LIMIT)
async def create_student_account(
    request: Request,
    body: CreateStudentAccountRequest,
    service: ProvisioningService = Depends(get_provisioning_service),
) -> StudentAccountResponse:
    """Create the login for a registration. Runs once per registration."""
    try:
        return await service.create_student_account(body)
    except ProvisioningServiceError as e:
        raise _to_http_error(e)


@router.post(
    "/staff-password",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    summary="Change staff password",
    responses={
        400: {"description": "Missing fields or weak password"},
        401: {"description": "Not authenticated"},
        403: {"description": "Caller is not a super admin"},
    },
)
async def change_staff_password(
    body: ChangeStaffPasswordRequest,
    caller: AuthenticatedUser,
    service: ProvisioningService = Depends(get_provisioning_service),
) -> SuccessResponse:
    """Set a new password on a staff account."""
    try:
        await service.change_staff_password(body, caller_roles=caller.roles)
    except ProvisioningServiceError as e:
        raise _to_http_error(e)
    return SuccessResponse()

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get authenticated callers with their roles loaded
- Get shared outbound clients (gateway, identity provider, email)
- Get service instances

Example:
    @router.post("/staff")
    async def create_staff(
        request: CreateStaffRequest,
        caller: AuthenticatedUser,
        service: ProvisioningService = Depends(get_provisioning_service),
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api.middleware.auth import CurrentUser, extract_bearer_token, get_current_user
from academy.core.config import Settings, get_settings
from academy.domains.auth.roles import ADMIN_ROLES, AppRole
from academy.domains.auth.service import RoleService
from academy.domains.notifications import NotificationService
from academy.domains.payments import PaymentService
from academy.domains.provisioning import ProvisioningService
from academy.domains.registrations import RegistrationService
from academy.domains.settings import SettingsService, get_settings_cache
from academy.infrastructure.cache import get_redis_optional
from academy.infrastructure.database.connection import get_session
from academy.infrastructure.identity import IdentityProviderClient
from academy.infrastructure.notifications import EmailClient
from academy.infrastructure.payments import PaystackClient

logger = logging.getLogger(__name__)

# Outbound client singletons, created on first use
_paystack_client: PaystackClient | None = None
_identity_client: IdentityProviderClient | None = None
_email_client: EmailClient | None = None


async def close_clients() -> None:
    """Close the shared outbound HTTP clients."""
    global _paystack_client, _identity_client, _email_client

    for client in (_paystack_client, _identity_client, _email_client):
        if client is not None:
            await client.close()

    _paystack_client = None
    _identity_client = None
    _email_client = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession, committed on success and rolled back on error.
    """
    async with get_session() as session:
        yield session


# =========================================================================
# Authentication Dependencies
# =========================================================================


def get_optional_user(request: Request) -> CurrentUser | None:
    """Get current user if authenticated, None otherwise."""
    return get_current_user(request)


def require_auth(request: Request) -> CurrentUser:
    """Require a verified caller.

    Raises:
        HTTPException: 401 if the token is missing or invalid.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_auth_with_roles(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Require a verified caller and load their roles from user_roles."""
    user = require_auth(request)
    user.roles = await RoleService(db).get_roles(user.id)
    return user


class RequireRole:
    """Dependency for requiring any of the given roles (effective).

    Example:
        @router.post("/{registration_id}/mark-paid")
        async def mark_paid(
            user: CurrentUser = Depends(RequireRole(AppRole.ACCOUNTANT, AppRole.ADMIN)),
        ):
            ...
    """

    def __init__(self, *roles: AppRole, detail: str = "Forbidden") -> None:
        self.roles = roles
        self.detail = detail

    async def __call__(
        self,
        user: CurrentUser = Depends(require_auth_with_roles),
    ) -> CurrentUser:
        """Check roles and return the caller.

        Raises:
            HTTPException: 403 if no held role satisfies the requirement.
        """
        if not user.has_any_role(*self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=self.detail,
            )
        return user


async def get_cleanup_caller(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> CurrentUser | None:
    """Caller check for the registration sweep.

    Scheduled invocations send no bearer token and are allowed. A bearer
    token must verify and belong to an admin.

    Raises:
        HTTPException: 401 for an unverifiable token, 403 for a non-admin.
    """
    if extract_bearer_token(request) is None:
        return None

    user = require_auth(request)
    user.roles = await RoleService(db).get_roles(user.id)
    if not user.has_any_role(*ADMIN_ROLES):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )
    return user


# =========================================================================
# Client Dependencies
# =========================================================================


def get_paystack_client() -> PaystackClient:
    """Get the shared payment gateway client."""
    global _paystack_client
    if _paystack_client is None:
        _paystack_client = PaystackClient(get_settings().paystack)
    return _paystack_client


def get_identity_client() -> IdentityProviderClient:
    """Get the shared identity provider admin client."""
    global _identity_client
    if _identity_client is None:
        _identity_client = IdentityProviderClient(get_settings().identity)
    return _identity_client


def get_email_client() -> EmailClient:
    """Get the shared email client."""
    global _email_client
    if _email_client is None:
        _email_client = EmailClient(get_settings().email)
    return _email_client


# =========================================================================
# Service Dependencies
# =========================================================================


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


async def get_payment_service(
    db: AsyncSession = Depends(get_db),
    gateway: PaystackClient = Depends(get_paystack_client),
) -> PaymentService:
    """Get PaymentService instance."""
    return PaymentService(db, gateway)


async def get_provisioning_service(
    db: AsyncSession = Depends(get_db),
    identity: IdentityProviderClient = Depends(get_identity_client),
) -> ProvisioningService:
    """Get ProvisioningService instance."""
    return ProvisioningService(db, identity)


async def get_registration_service(
    db: AsyncSession = Depends(get_db),
) -> RegistrationService:
    """Get RegistrationService instance."""
    return RegistrationService(db)


async def get_role_service(
    db: AsyncSession = Depends(get_db),
) -> RoleService:
    """Get RoleService instance."""
    return RoleService(db)


async def get_settings_service(
    db: AsyncSession = Depends(get_db),
) -> SettingsService:
    """Get SettingsService wired to the process cache and Redis publisher."""
    return SettingsService(
        db,
        get_settings_cache(),
        publisher=get_redis_optional(),
        channel=get_settings().redis.settings_channel,
    )


def get_notification_service(
    email_client: EmailClient = Depends(get_email_client),
) -> NotificationService:
    """Get NotificationService instance."""
    return NotificationService(email_client, get_settings().email.academy_name)


# =========================================================================
# Type Aliases for Cleaner Endpoint Signatures
# =========================================================================

DB = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
OptionalUser = Annotated[CurrentUser | None, Depends(get_optional_user)]
AuthenticatedUser = Annotated[CurrentUser, Depends(require_auth_with_roles)]
AdminUser = Annotated[CurrentUser, Depends(RequireRole(AppRole.ADMIN))]
AccountantUser = Annotated[
    CurrentUser, Depends(RequireRole(AppRole.ACCOUNTANT, AppRole.ADMIN))
]
CleanupCaller = Annotated[CurrentUser | None, Depends(get_cleanup_caller)]

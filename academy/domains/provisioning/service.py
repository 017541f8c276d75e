# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account provisioning service.

Privileged operations that create identity provider accounts and grant
roles:
- Bootstrapping the first super admin (shared secret, first run only)
- Creating staff accounts (admin callers, role hierarchy enforced)
- Creating the login for a paid registration
- Resetting a staff member's password (super admin callers)

An email that is already registered is not an error: the existing account
is reused. Bootstrap and student accounts give it the supplied password;
creating staff only adds the role and never changes an existing credential.
"""

from __future__ import annotations

import hmac
import logging
from typing import Iterable

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.domains.auth.roles import (
    ADMIN_ROLES,
    STAFF_ROLES,
    AppRole,
    can_assign_role,
    parse_role,
    parse_roles,
    satisfies,
)
from academy.domains.auth.service import RoleService
from academy.infrastructure.database.models import Profile, Registration
from academy.infrastructure.identity import (
    EnsuredUser,
    IdentityProviderClient,
    IdentityProviderError,
)
from academy.models.provisioning import (
    BootstrapAdminRequest,
    ChangeStaffPasswordRequest,
    CreateStaffRequest,
    CreateStudentAccountRequest,
    ProvisionedUserResponse,
    StudentAccountResponse,
)
from academy.utils.ids import is_uuid

logger = logging.getLogger(__name__)

STUDENT_MIN_PASSWORD_LENGTH = 8
STAFF_MIN_PASSWORD_LENGTH = 6

# pg_advisory_xact_lock key held while bootstrapping
BOOTSTRAP_LOCK_KEY = 0x61636164

# Listed in the order shown to callers.
_VALID_STAFF_ROLES = ("admin", "teacher", "accountant", "super_admin")


class ProvisioningServiceError(Exception):
    """Base exception for provisioning errors."""

    pass


class MissingFieldsError(ProvisioningServiceError):
    """Raised when required request fields are absent."""

    pass


class InvalidSetupSecretError(ProvisioningServiceError):
    """Raised when the bootstrap secret is missing or wrong."""

    pass


class SuperAdminExistsError(ProvisioningServiceError):
    """Raised when bootstrapping after a super admin already exists."""

    pass


class InsufficientRoleError(ProvisioningServiceError):
    """Raised when the caller's roles do not allow the operation."""

    pass


class InvalidRoleError(ProvisioningServiceError):
    """Raised when the requested role is not a staff role."""

    pass


class WeakPasswordError(ProvisioningServiceError):
    """Raised when a password is shorter than allowed."""

    pass


class InvalidUserIdError(ProvisioningServiceError):
    """Raised when a target user id is not a UUID."""

    pass


class RegistrationNotFoundError(ProvisioningServiceError):
    """Raised when the registration does not exist."""

    pass


class AccountAlreadyCreatedError(ProvisioningServiceError):
    """Raised when a registration already has a login."""

    pass


class IdentityOperationError(ProvisioningServiceError):
    """Raised when an identity provider call fails.

    Attributes:
        status_code: HTTP status the API should answer with.
    """

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class RoleAssignmentError(ProvisioningServiceError):
    """Raised when a required role row could not be written."""

    pass


def _missing(*values: str | None) -> bool:
    return any(not (v or "").strip() for v in values)


class ProvisioningService:
    """Service for privileged account operations.

    Attributes:
        db: Async database session.
        identity: Identity provider admin client.
        roles: Role lookup and assignment.
    """

    def __init__(self, db: AsyncSession, identity: IdentityProviderClient) -> None:
        """Initialize provisioning service.

        Args:
            db: Async database session.
            identity: Identity provider admin client.
        """
        self.db = db
        self.identity = identity
        self.roles = RoleService(db)

    async def bootstrap_admin(
        self,
        request: BootstrapAdminRequest,
        expected_secret: str | None,
    ) -> ProvisionedUserResponse:
        """Create the first super admin.

        Args:
            request: Account details and the setup secret.
            expected_secret: Configured bootstrap secret.

        Returns:
            The created account id.

        Raises:
            InvalidSetupSecretError: If the secret is not configured or does not match.
            MissingFieldsError: If email, password or full_name is missing.
            SuperAdminExistsError: If any super admin already exists.
            IdentityOperationError: If the account cannot be created.
        """
        supplied = request.setup_secret or ""
        if not expected_secret or not hmac.compare_digest(
            supplied.encode("utf-8"), expected_secret.encode("utf-8")
        ):
            logger.warning("Bootstrap attempted with invalid setup secret")
            raise InvalidSetupSecretError("Invalid setup secret")

        if _missing(request.email, request.password, request.full_name):
            raise MissingFieldsError("Missing required fields: email, password, full_name")

        # Concurrent bootstraps queue here until the first one commits
        await self.db.execute(select(func.pg_advisory_xact_lock(BOOTSTRAP_LOCK_KEY)))
        if await self.roles.has_super_admin():
            raise SuperAdminExistsError("A super_admin already exists. Bootstrap is disabled.")

        ensured = await self._ensure_user(request.email, request.password, request.full_name)
        user_id = ensured.user.id

        await self._upsert_profile(user_id, request.email, request.full_name)
        await self._grant_role(user_id, AppRole.SUPER_ADMIN)
        await self.db.commit()

        logger.info("Super admin bootstrapped: user=%s", user_id)
        return ProvisionedUserResponse(
            user_id=user_id,
            message="Super admin bootstrapped successfully",
        )

    async def create_staff(
        self,
        request: CreateStaffRequest,
        caller_roles: Iterable[AppRole | str],
    ) -> ProvisionedUserResponse:
        """Create a staff account with a role.

        Args:
            request: Account details and the role to grant.
            caller_roles: Roles held by the authenticated caller.

        Returns:
            The created or reused account id.

        Raises:
            InsufficientRoleError: If the caller is not an admin, or tries to
                create a super admin without being one.
            MissingFieldsError: If a field is missing.
            InvalidRoleError: If the role is not a staff role.
            IdentityOperationError: If the account cannot be created.
            RoleAssignmentError: If the role row cannot be written.
        """
        held = parse_roles(caller_roles)
        if not satisfies(held, ADMIN_ROLES):
            raise InsufficientRoleError("Forbidden: admin role required")

        if _missing(request.email, request.password, request.full_name, request.role):
            raise MissingFieldsError("Missing required fields: email, password, full_name, role")

        role = parse_role(request.role)
        if role is None or role not in STAFF_ROLES:
            raise InvalidRoleError(f"Invalid role. Must be one of: {', '.join(_VALID_STAFF_ROLES)}")

        if not can_assign_role(held, role):
            raise InsufficientRoleError("Only super_admin can create super_admin accounts")

        # An existing account keeps its password and profile; only the role is added
        ensured = await self._ensure_user(
            request.email, request.password, request.full_name, reset_password=False
        )
        user_id = ensured.user.id

        await self._upsert_profile(
            user_id, request.email, request.full_name, overwrite=ensured.created
        )
        await self._grant_role(user_id, role)
        await self.db.commit()

        logger.info(
            "Staff member provisioned: user=%s, role=%s, created=%s",
            user_id,
            role.value,
            ensured.created,
        )
        return ProvisionedUserResponse(
            user_id=user_id,
            message=f"Staff member created with role: {role.value}",
        )

    async def create_student_account(
        self,
        request: CreateStudentAccountRequest,
    ) -> StudentAccountResponse:
        """Create the login for a registration and link it.

        Runs at most once per registration: the link is written only while
        ``account_created`` is still false.

        Args:
            request: Registration id and the chosen password.

        Returns:
            The account id and email.

        Raises:
            MissingFieldsError: If a field is missing.
            WeakPasswordError: If the password is shorter than 8 characters.
            RegistrationNotFoundError: If the registration does not exist.
            AccountAlreadyCreatedError: If the registration already has a login.
            IdentityOperationError: If the account cannot be created or updated.
        """
        if _missing(request.registration_id, request.password):
            raise MissingFieldsError("registration_id and password are required")

        if len(request.password) < STUDENT_MIN_PASSWORD_LENGTH:
            raise WeakPasswordError(
                f"Password must be at least {STUDENT_MIN_PASSWORD_LENGTH} characters"
            )

        registration = await self._get_registration(request.registration_id)
        if registration is None:
            raise RegistrationNotFoundError("Registration not found")

        if registration.account_created:
            raise AccountAlreadyCreatedError("Account already created for this registration")

        email = registration.email
        full_name = registration.full_name

        ensured = await self._ensure_user(email, request.password, full_name)
        user_id = ensured.user.id

        await self._upsert_profile(user_id, email, full_name)
        try:
            await self.roles.assign_role(user_id, AppRole.STUDENT)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Role assignment error for %s: %s", user_id, e)

        result = await self.db.execute(
            update(Registration)
            .where(
                Registration.id == registration.id,
                Registration.account_created.is_(False),
            )
            .values(user_id=user_id, account_created=True)
        )
        if not result.rowcount:
            await self.db.rollback()
            raise AccountAlreadyCreatedError("Account already created for this registration")

        await self.db.commit()

        logger.info(
            "Student account provisioned: registration=%s, user=%s, created=%s",
            registration.id,
            user_id,
            ensured.created,
        )
        return StudentAccountResponse(user_id=user_id, email=email)

    async def change_staff_password(
        self,
        request: ChangeStaffPasswordRequest,
        caller_roles: Iterable[AppRole | str],
    ) -> None:
        """Set a new password on a staff account.

        Args:
            request: Target user id and the new password.
            caller_roles: Roles held by the authenticated caller.

        Raises:
            InsufficientRoleError: If the caller is not a super admin.
            MissingFieldsError: If a field is missing.
            InvalidUserIdError: If the user id is not a UUID.
            WeakPasswordError: If the password is shorter than 6 characters.
            IdentityOperationError: If the update fails.
        """
        if AppRole.SUPER_ADMIN not in parse_roles(caller_roles):
            raise InsufficientRoleError("Only super admins can change staff passwords")

        if _missing(request.user_id, request.new_password):
            raise MissingFieldsError("user_id and new_password are required")

        if not is_uuid(request.user_id):
            raise InvalidUserIdError("Invalid user_id")

        if len(request.new_password) < STAFF_MIN_PASSWORD_LENGTH:
            raise WeakPasswordError(
                f"Password must be at least {STAFF_MIN_PASSWORD_LENGTH} characters"
            )

        try:
            await self.identity.update_user(request.user_id, password=request.new_password)
        except IdentityProviderError as e:
            logger.error("Password change failed for %s: %s", request.user_id, e)
            raise IdentityOperationError(e.message, status_code=500) from e

        logger.info("Staff password changed: user=%s", request.user_id)

    # ========== Private helpers ==========

    async def _ensure_user(
        self,
        email: str,
        password: str,
        full_name: str,
        reset_password: bool = True,
    ) -> EnsuredUser:
        try:
            return await self.identity.ensure_user(
                email.strip(), password, full_name, reset_password=reset_password
            )
        except IdentityProviderError as e:
            logger.error("Identity provisioning failed for %s: %s", email, e)
            raise IdentityOperationError(e.message, status_code=400) from e

    async def _grant_role(self, user_id: str, role: AppRole) -> None:
        try:
            await self.roles.assign_role(user_id, role)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Role assignment failed: user=%s, role=%s, error=%s", user_id, role.value, e)
            raise RoleAssignmentError(str(e)) from e

    async def _upsert_profile(
        self,
        user_id: str,
        email: str,
        full_name: str,
        overwrite: bool = True,
    ) -> None:
        """Create the profile row, refreshing it when ``overwrite`` is set.

        Failures are logged only.
        """
        stmt = insert(Profile).values(id=user_id, email=email, full_name=full_name)
        if overwrite:
            stmt = stmt.on_conflict_do_update(
                index_elements=[Profile.id],
                set_={"email": email, "full_name": full_name},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=[Profile.id])
        try:
            async with self.db.begin_nested():
                await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Profile upsert error for %s: %s", user_id, e)

    async def _get_registration(self, registration_id: str) -> Registration | None:
        """Get registration by id."""
        if not is_uuid(registration_id):
            return None
        result = await self.db.execute(
            select(Registration).where(Registration.id == registration_id)
        )
        return result.scalar_one_or_none()

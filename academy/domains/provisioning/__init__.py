# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account provisioning domain."""

from academy.domains.provisioning.service import (
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

__all__ = [
    "AccountAlreadyCreatedError",
    "IdentityOperationError",
    "InsufficientRoleError",
    "InvalidRoleError",
    "InvalidSetupSecretError",
    "InvalidUserIdError",
    "MissingFieldsError",
    "ProvisioningService",
    "ProvisioningServiceError",
    "RegistrationNotFoundError",
    "RoleAssignmentError",
    "SuperAdminExistsError",
    "WeakPasswordError",
]

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account provisioning API models."""

from pydantic import BaseModel


class BootstrapAdminRequest(BaseModel):
    """Create the first super admin."""

    email: str | None = None
    password: str | None = None
    full_name: str | None = None
    setup_secret: str | None = None


class CreateStaffRequest(BaseModel):
    """Create a staff account with a role."""

    email: str | None = None
    password: str | None = None
    full_name: str | None = None
    role: str | None = None


class CreateStudentAccountRequest(BaseModel):
    """Create the login for a registration."""

    registration_id: str | None = None
    password: str | None = None


class ChangeStaffPasswordRequest(BaseModel):
    """Reset a staff member's password."""

    user_id: str | None = None
    new_password: str | None = None


class ProvisionedUserResponse(BaseModel):
    """Account created or reused by a provisioning call."""

    success: bool = True
    user_id: str
    message: str | None = None


class StudentAccountResponse(BaseModel):
    """Student login created for a registration."""

    success: bool = True
    user_id: str
    email: str
    message: str | None = None

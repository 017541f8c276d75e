# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Registration API models."""

from pydantic import BaseModel


class PublicRegistrationRequest(BaseModel):
    """Look up a registration without signing in."""

    registration_id: str | None = None


class PublicProgramInfo(BaseModel):
    """Program fields shown on the enrollment completion page."""

    name: str
    tuition_fee: float
    registration_fee: float | None = None


class PublicRegistration(BaseModel):
    """Registration fields safe to show without signing in."""

    id: str
    first_name: str
    last_name: str
    email: str
    program_id: str | None = None
    payment_status: str
    account_created: bool
    programs: PublicProgramInfo | None = None


class PublicRegistrationResponse(BaseModel):
    """Wrapper matching the enrollment page's expectations."""

    registration: PublicRegistration


class CleanupResponse(BaseModel):
    """Result of an expired-registration sweep."""

    success: bool = True
    records_deleted: int
    deadline_days: int


class MarkPaidResponse(BaseModel):
    """Result of an accountant marking a registration paid."""

    success: bool = True
    registration_id: str
    payment_status: str

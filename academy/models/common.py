# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums and response shapes."""

from enum import Enum

from pydantic import BaseModel


class PaymentStatus(str, Enum):
    """Aggregate payment state of a registration."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OFFICE_PENDING = "office_pending"


class PaymentPlan(str, Enum):
    """How a student chose to pay."""

    FULL = "full"
    TWO_INSTALLMENTS = "2_installments"
    THREE_INSTALLMENTS = "3_installments"
    OFFICE_PAY = "office_pay"


class RegistrationStatus(str, Enum):
    """Review state of a registration."""

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    ENROLLED = "enrolled"


class PaymentRecordStatus(str, Enum):
    """State of a single payment attempt."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    error: str


class SuccessResponse(BaseModel):
    """Generic success acknowledgement."""

    success: bool = True
    message: str | None = None

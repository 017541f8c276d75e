# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Payment API models."""

from pydantic import BaseModel, Field


class InitializePaymentRequest(BaseModel):
    """Open a gateway transaction for a registration."""

    registration_id: str | None = Field(default=None, description="Registration to pay for")
    callback_url: str | None = Field(
        default=None,
        description="Where the gateway redirects after payment",
    )


class InitializePaymentResponse(BaseModel):
    """Hosted payment page details."""

    authorization_url: str
    access_code: str
    reference: str


class VerifyPaymentRequest(BaseModel):
    """Check a transaction with the gateway."""

    reference: str | None = Field(default=None, description="Gateway transaction reference")


class VerifyPaymentResponse(BaseModel):
    """Outcome of a verification."""

    verified: bool = True
    payment_successful: bool
    registration_id: str
    amount: float
    currency: str | None = None
    paid_at: str | None = None
    payment_status: str | None = Field(
        default=None,
        description="Registration payment status after reconciliation",
    )

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment payments domain."""

from academy.domains.payments.reconciliation import (
    determine_payment_status,
    next_registration_status,
)
from academy.domains.payments.service import (
    InvalidWebhookPayloadError,
    InvalidWebhookSignatureError,
    MissingFieldError,
    PaymentAlreadyCompletedError,
    PaymentGatewayError,
    PaymentGatewayNotConfiguredError,
    PaymentRegistrationUnresolvedError,
    PaymentService,
    PaymentServiceError,
    ReconciliationResult,
    RegistrationNotFoundError,
    RegistrationUpdateError,
    WebhookOutcome,
)

__all__ = [
    "InvalidWebhookPayloadError",
    "InvalidWebhookSignatureError",
    "MissingFieldError",
    "PaymentAlreadyCompletedError",
    "PaymentGatewayError",
    "PaymentGatewayNotConfiguredError",
    "PaymentRegistrationUnresolvedError",
    "PaymentService",
    "PaymentServiceError",
    "ReconciliationResult",
    "RegistrationNotFoundError",
    "RegistrationUpdateError",
    "WebhookOutcome",
    "determine_payment_status",
    "next_registration_status",
]

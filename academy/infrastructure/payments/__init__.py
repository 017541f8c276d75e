# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Payment gateway integration."""

from academy.infrastructure.payments.paystack import (
    InitializedTransaction,
    PaystackClient,
    PaystackError,
    PaystackNotConfiguredError,
    VerifiedTransaction,
    compute_signature,
    to_minor_units,
    verify_signature,
)

__all__ = [
    "InitializedTransaction",
    "PaystackClient",
    "PaystackError",
    "PaystackNotConfiguredError",
    "VerifiedTransaction",
    "compute_signature",
    "to_minor_units",
    "verify_signature",
]

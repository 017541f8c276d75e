# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student registrations domain."""

from academy.domains.registrations.service import (
    CleanupResult,
    InvalidRegistrationIdError,
    MissingRegistrationIdError,
    RegistrationNotFoundError,
    RegistrationService,
    RegistrationServiceError,
    parse_expiry_days,
)

__all__ = [
    "CleanupResult",
    "InvalidRegistrationIdError",
    "MissingRegistrationIdError",
    "RegistrationNotFoundError",
    "RegistrationService",
    "RegistrationServiceError",
    "parse_expiry_days",
]

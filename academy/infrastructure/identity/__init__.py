# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Identity provider admin API client."""

from academy.infrastructure.identity.client import (
    EnsuredUser,
    IdentityProviderClient,
    IdentityProviderError,
    IdentityUser,
    UserAlreadyExistsError,
)

__all__ = [
    "EnsuredUser",
    "IdentityProviderClient",
    "IdentityProviderError",
    "IdentityUser",
    "UserAlreadyExistsError",
]

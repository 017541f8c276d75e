# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for Academy Backend.

Settings are Pydantic-based and loaded from environment variables.

Example:
    >>> from academy.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.paystack.currency)
    'NGN'
"""

from academy.core.config.settings import (
    APISettings,
    BootstrapSettings,
    CleanupSettings,
    CORSSettings,
    DatabaseSettings,
    EmailSettings,
    IdentityProviderSettings,
    JWTSettings,
    PaystackSettings,
    RateLimitSettings,
    RedisSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "APISettings",
    "BootstrapSettings",
    "CleanupSettings",
    "CORSSettings",
    "DatabaseSettings",
    "EmailSettings",
    "IdentityProviderSettings",
    "JWTSettings",
    "PaystackSettings",
    "RateLimitSettings",
    "RedisSettings",
]

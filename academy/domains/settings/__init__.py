# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Settings domain: defaults, realtime cache and persistence."""

from academy.domains.settings.cache import (
    DEFAULT_SETTINGS,
    ChangeType,
    SettingsCache,
    SettingsChange,
    get_settings_cache,
    reset_settings_cache,
)
from academy.domains.settings.service import (
    InvalidSettingKeyError,
    SettingNotFoundError,
    SettingsListener,
    SettingsService,
    SettingsServiceError,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "ChangeType",
    "InvalidSettingKeyError",
    "SettingNotFoundError",
    "SettingsCache",
    "SettingsChange",
    "SettingsListener",
    "SettingsService",
    "SettingsServiceError",
    "get_settings_cache",
    "reset_settings_cache",
]

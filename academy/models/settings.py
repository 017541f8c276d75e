# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Settings API models."""

from typing import Any

from pydantic import BaseModel


class SettingValue(BaseModel):
    """A single setting."""

    key: str
    value: Any = None


class SettingUpdateRequest(BaseModel):
    """New value for a setting (any JSON value)."""

    value: Any = None


class SettingsResponse(BaseModel):
    """All settings with defaults applied."""

    settings: dict[str, Any]

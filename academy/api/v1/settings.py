# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academy settings endpoints.

Reads are public and served from the process cache with defaults applied.
Writes require an admin and are fanned out to the other API processes.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from academy.api.dependencies import AdminUser, get_settings_service
from academy.domains.settings import (
    InvalidSettingKeyError,
    SettingNotFoundError,
    SettingsService,
)
from academy.models.settings import SettingsResponse, SettingUpdateRequest, SettingValue

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=SettingsResponse, summary="List settings")
async def list_settings(
    service: SettingsService = Depends(get_settings_service),
) -> SettingsResponse:
    """All settings with defaults applied."""
    return SettingsResponse(settings=await service.get_all())


@router.get("/{key}", response_model=SettingValue, summary="Get setting")
async def get_setting(
    key: str,
    service: SettingsService = Depends(get_settings_service),
) -> SettingValue:
    """One setting value."""
    try:
        value = await service.get(key)
    except InvalidSettingKeyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SettingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return SettingValue(key=key, value=value)


@router.put("/{key}", response_model=SettingValue, summary="Update setting")
async def update_setting(
    key: str,
    body: SettingUpdateRequest,
    caller: AdminUser,
    service: SettingsService = Depends(get_settings_service),
) -> SettingValue:
    """Store a value and broadcast the change."""
    try:
        change = await service.upsert(key, body.value, actor_id=caller.id)
    except InvalidSettingKeyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return SettingValue(key=change.key, value=change.value)


@router.delete("/{key}", response_model=SettingValue, summary="Delete setting")
async def delete_setting(
    key: str,
    caller: AdminUser,
    service: SettingsService = Depends(get_settings_service),
) -> SettingValue:
    """Remove a stored value. The response carries the default now in effect."""
    try:
        change = await service.delete(key, actor_id=caller.id)
    except InvalidSettingKeyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SettingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return SettingValue(key=change.key, value=service.cache.get(change.key))

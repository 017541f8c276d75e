# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Settings service and change listener.

SettingsService reads and writes the ``settings`` table, applies each write
to the local cache and publishes it on the settings channel.
SettingsListener consumes that channel so every API process converges on
the same values.

Example:
    >>> service = SettingsService(db, get_settings_cache(), redis, "settings-realtime")
    >>> await service.upsert("hero_title", "Welcome", actor_id=user.id)
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from academy.domains.settings.cache import ChangeType, SettingsCache, SettingsChange
from academy.infrastructure.cache import RedisClient, RedisError
from academy.infrastructure.database.models import Setting

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[a-z0-9_]{1,100}$")


class SettingsServiceError(Exception):
    """Base exception for settings errors."""

    pass


class InvalidSettingKeyError(SettingsServiceError):
    """Raised when a key is not lowercase snake case."""

    pass


class SettingNotFoundError(SettingsServiceError):
    """Raised when a key has neither a stored value nor a default."""

    pass


def validate_key(key: str) -> str:
    """Normalize and check a setting key.

    Raises:
        InvalidSettingKeyError: If the key is not 1-100 chars of [a-z0-9_].
    """
    normalized = (key or "").strip()
    if not _KEY_PATTERN.match(normalized):
        raise InvalidSettingKeyError(
            "Setting key must be 1-100 characters of lowercase letters, digits and underscores"
        )
    return normalized


class SettingsService:
    """Read-through access to settings with change publication.

    Attributes:
        db: Async database session.
        cache: Process-wide settings cache.
        publisher: Redis client used to fan changes out, if available.
        channel: Pub/sub channel name.
    """

    def __init__(
        self,
        db: AsyncSession,
        cache: SettingsCache,
        publisher: RedisClient | None = None,
        channel: str = "settings-realtime",
    ) -> None:
        self.db = db
        self.cache = cache
        self.publisher = publisher
        self.channel = channel

    async def load_all(self) -> dict[str, Any]:
        """Bulk fetch stored settings into the cache.

        Returns:
            Snapshot with defaults applied.
        """
        result = await self.db.execute(select(Setting.key, Setting.value))
        self.cache.seed((row.key, row.value) for row in result.all())
        return self.cache.snapshot()

    async def get_all(self) -> dict[str, Any]:
        """All settings with defaults applied."""
        if not self.cache.is_seeded:
            return await self.load_all()
        return self.cache.snapshot()

    async def get(self, key: str) -> Any:
        """One setting value.

        Raises:
            InvalidSettingKeyError: If the key is malformed.
            SettingNotFoundError: If the key is unknown.
        """
        key = validate_key(key)
        if not self.cache.is_seeded:
            await self.load_all()
        if not self.cache.has(key):
            raise SettingNotFoundError(f"Setting not found: {key}")
        return self.cache.get(key)

    async def upsert(self, key: str, value: Any, actor_id: str | None = None) -> SettingsChange:
        """Store a value, update the cache and publish the change.

        Raises:
            InvalidSettingKeyError: If the key is malformed.
        """
        key = validate_key(key)
        await self.db.execute(
            insert(Setting)
            .values(key=key, value=value)
            .on_conflict_do_update(index_elements=[Setting.key], set_={"value": value})
        )
        await self.db.commit()

        change = SettingsChange(type=ChangeType.UPSERT, key=key, value=value)
        await self._propagate(change)
        logger.info("Setting updated: key=%s, by=%s", key, actor_id)
        return change

    async def delete(self, key: str, actor_id: str | None = None) -> SettingsChange:
        """Remove a stored value so the default applies again.

        Raises:
            InvalidSettingKeyError: If the key is malformed.
            SettingNotFoundError: If nothing is stored under the key.
        """
        key = validate_key(key)
        result = await self.db.execute(delete(Setting).where(Setting.key == key))
        if not result.rowcount:
            await self.db.rollback()
            raise SettingNotFoundError(f"Setting not found: {key}")
        await self.db.commit()

        change = SettingsChange(type=ChangeType.DELETE, key=key)
        await self._propagate(change)
        logger.info("Setting deleted: key=%s, by=%s", key, actor_id)
        return change

    async def _propagate(self, change: SettingsChange) -> None:
        """Apply locally, then publish. Publish failures are logged only."""
        self.cache.apply(change)
        if self.publisher is None:
            return
        try:
            await self.publisher.publish_json(self.channel, change.to_dict())
        except RedisError as e:
            logger.warning("Failed to publish settings change for %s: %s", change.key, e)


class SettingsListener:
    """Background consumer applying channel events to the cache."""

    def __init__(self, redis: RedisClient, cache: SettingsCache, channel: str) -> None:
        self.redis = redis
        self.cache = cache
        self.channel = channel
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start consuming in a background task."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self.run(), name="settings-listener")

    async def stop(self) -> None:
        """Cancel the background task and wait for it."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def handle(self, payload: Any) -> bool:
        """Apply one channel payload.

        Returns:
            False when the payload was malformed and ignored.
        """
        try:
            change = SettingsChange.from_dict(payload)
        except ValueError as e:
            logger.warning("Ignoring malformed settings event: %s", e)
            return False
        self.cache.apply(change)
        return True

    async def run(self) -> None:
        """Consume the channel until cancelled or the connection fails."""
        try:
            async for payload in self.redis.listen(self.channel):
                self.handle(payload)
        except RedisError as e:
            logger.error("Settings listener stopped: %s", e)

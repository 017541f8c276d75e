# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Redis connection carrying the settings change channel.

Redis is used only for pub/sub: settings writes are published as JSON
events and every API process listens so its in-memory settings cache stays
current. Nothing is stored in Redis.

Example:
    await init_redis(settings)
    redis = get_redis()
    await redis.publish_json("settings-realtime", {"type": "UPSERT", "key": "k"})
    async for event in redis.listen("settings-realtime"):
        ...
"""

import json
import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional

from redis import exceptions as redis_exceptions
from redis.asyncio import Redis

if TYPE_CHECKING:
    from academy.core.config.settings import Settings

logger = logging.getLogger(__name__)

_redis_client: Optional["RedisClient"] = None


class RedisError(Exception):
    """A Redis call failed or the client is not connected.

    Attributes:
        message: What was being attempted.
        original_error: Underlying redis-py exception, if any.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error is None:
            return self.message
        return f"{self.message} ({self.original_error})"


def _decode(data: Any) -> Any:
    """Channel payloads are JSON; anything else is passed through as text."""
    if not isinstance(data, str):
        return data
    try:
        return json.loads(data)
    except ValueError:
        return data


class RedisClient:
    """Pub/sub wrapper around a redis.asyncio connection."""

    def __init__(self, settings: "Settings") -> None:
        self._url = settings.redis.url
        self._max_connections = settings.redis.max_connections
        self._redis: Optional[Redis] = None

    @property
    def connected(self) -> bool:
        return self._redis is not None

    async def connect(self) -> None:
        """Open the connection pool and check it answers.

        Raises:
            RedisError: If the server cannot be reached.
        """
        redis = Redis.from_url(
            self._url,
            max_connections=self._max_connections,
            decode_responses=True,
        )
        try:
            await redis.ping()
        except redis_exceptions.RedisError as e:
            await redis.aclose()
            raise RedisError("Could not connect to Redis", e) from e
        self._redis = redis

    async def close(self) -> None:
        if self._redis is None:
            return
        redis, self._redis = self._redis, None
        await redis.aclose()

    def _client(self) -> Redis:
        if self._redis is None:
            raise RedisError("Redis client is not connected")
        return self._redis

    async def publish_json(self, channel: str, payload: dict[str, Any]) -> int:
        """Publish ``payload`` as JSON.

        Returns:
            Number of subscribers that received it.

        Raises:
            RedisError: If publishing fails.
        """
        redis = self._client()
        body = json.dumps(payload, ensure_ascii=False, default=str)
        try:
            return await redis.publish(channel, body)
        except redis_exceptions.RedisError as e:
            raise RedisError(f"Publish to {channel} failed", e) from e

    async def listen(self, channel: str) -> AsyncIterator[Any]:
        """Yield decoded messages from ``channel`` until the caller stops.

        Raises:
            RedisError: If the subscription fails or the connection drops.
        """
        pubsub = self._client().pubsub(ignore_subscribe_messages=True)
        try:
            await pubsub.subscribe(channel)
            logger.info("Listening on Redis channel %s", channel)
            async for message in pubsub.listen():
                if message.get("type") == "message":
                    yield _decode(message.get("data"))
        except redis_exceptions.RedisError as e:
            raise RedisError(f"Listening on {channel} failed", e) from e
        finally:
            await pubsub.aclose()

    async def ping(self) -> bool:
        """True when the server answers a PING."""
        if self._redis is None:
            return False
        try:
            return bool(await self._redis.ping())
        except redis_exceptions.RedisError:
            return False


async def init_redis(settings: "Settings") -> None:
    """Connect the process-wide client.

    Raises:
        RedisError: If connection fails.
    """
    global _redis_client

    client = RedisClient(settings)
    await client.connect()
    _redis_client = client


async def close_redis() -> None:
    global _redis_client

    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None


def get_redis() -> RedisClient:
    """The process-wide client.

    Raises:
        RedisError: If init_redis() has not run.
    """
    if _redis_client is None:
        raise RedisError("Redis not initialized")
    return _redis_client


def get_redis_optional() -> Optional[RedisClient]:
    """The process-wide client, or None when Redis is unavailable."""
    return _redis_client

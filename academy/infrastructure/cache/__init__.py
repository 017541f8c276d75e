# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cache infrastructure using Redis.

Example:
    from academy.infrastructure.cache import init_redis, get_redis

    await init_redis(settings)
    redis = get_redis()
    await close_redis()
"""

from academy.infrastructure.cache.redis_client import (
    RedisClient,
    RedisError,
    close_redis,
    get_redis,
    get_redis_optional,
    init_redis,
)

__all__ = [
    "RedisClient",
    "RedisError",
    "close_redis",
    "get_redis",
    "get_redis_optional",
    "init_redis",
]

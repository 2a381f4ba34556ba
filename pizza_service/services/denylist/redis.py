"""
Redis token denylist.

Each revoked token becomes a key with a TTL equal to the token's remaining
lifetime; Redis evicts it at expiry, so ``prune`` has nothing to do.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from pizza_service.core.config import get_settings
from pizza_service.services.denylist.base import BaseTokenDenylist

logger = logging.getLogger(__name__)

KEY_PREFIX = "jwt-pizza:revoked:"


class RedisTokenDenylist(BaseTokenDenylist):
    """Denylist stored in Redis with per-key expiry."""

    def __init__(self, client: Optional[aioredis.Redis] = None):
        if client is None:
            client = aioredis.from_url(get_settings().redis_url, socket_timeout=2)
        self._client = client
        logger.info("RedisTokenDenylist initialized")

    @property
    def backend_name(self) -> str:
        return "redis"

    @staticmethod
    def _key(jti: str) -> str:
        return f"{KEY_PREFIX}{jti}"

    async def revoke(self, jti: str, expires_at: datetime) -> None:
        ttl = math.ceil((expires_at - datetime.now(timezone.utc)).total_seconds())
        if ttl <= 0:
            return
        await self._client.set(self._key(jti), 1, ex=ttl)
        logger.debug(f"Token {jti} revoked for {ttl}s")

    async def is_revoked(self, jti: str) -> bool:
        return bool(await self._client.exists(self._key(jti)))

    async def prune(self) -> int:
        return 0

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

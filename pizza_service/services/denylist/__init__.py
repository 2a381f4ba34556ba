"""
Token Denylist Factory

Provides a single entry point for obtaining the revoked-token store.

Usage:
    from pizza_service.services.denylist import get_token_denylist

    denylist = get_token_denylist()
    await denylist.revoke(claims.jti, claims.expires_at)

Backend Switching:
    - TOKEN_DENYLIST_BACKEND=database → DatabaseTokenDenylist
    - TOKEN_DENYLIST_BACKEND=redis → RedisTokenDenylist
"""

import logging
from functools import lru_cache

from pizza_service.core.config import DenylistBackend, get_settings
from pizza_service.services.denylist.base import BaseTokenDenylist
from pizza_service.services.denylist.database import DatabaseTokenDenylist
from pizza_service.services.denylist.redis import RedisTokenDenylist

logger = logging.getLogger(__name__)


@lru_cache()
def get_token_denylist() -> BaseTokenDenylist:
    """
    Get the configured token denylist instance.

    The instance is cached so every request checks the same store.

    Returns:
        BaseTokenDenylist: Configured denylist
    """
    settings = get_settings()

    if settings.token_denylist_backend == DenylistBackend.REDIS:
        logger.info("Token Denylist: Using RedisTokenDenylist")
        return RedisTokenDenylist()

    logger.info("Token Denylist: Using DatabaseTokenDenylist")
    return DatabaseTokenDenylist()


def reset_token_denylist() -> None:
    """
    Clear the cached denylist instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_token_denylist.cache_clear()
    logger.debug("Token denylist cache cleared")


__all__ = [
    "get_token_denylist",
    "reset_token_denylist",
    "BaseTokenDenylist",
    "DatabaseTokenDenylist",
    "RedisTokenDenylist",
]

"""
Pizza Factory Service Factory

Provides a single entry point for obtaining the factory client, so order
placement stays agnostic about which implementation is being used.

Usage:
    from pizza_service.services.factory import get_factory_service

    factory = get_factory_service()
    result = await factory.fulfill_order(diner, order)

Environment Switching:
    - ENV_MODE=development → MockFactoryService (no network calls)
    - ENV_MODE=staging → HttpFactoryService
    - ENV_MODE=production → HttpFactoryService
"""

import logging
from functools import lru_cache

from pizza_service.core.config import get_settings
from pizza_service.services.factory.base import BaseFactoryService, FulfillmentResult, sign_order
from pizza_service.services.factory.http import HttpFactoryService
from pizza_service.services.factory.mock import MockFactoryService

logger = logging.getLogger(__name__)


@lru_cache()
def get_factory_service() -> BaseFactoryService:
    """
    Get the configured pizza factory instance.

    The instance is cached (singleton pattern) so every request shares the
    same client configuration.

    Returns:
        BaseFactoryService: MockFactoryService or HttpFactoryService
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Factory Service: Using MockFactoryService (development mode)")
        return MockFactoryService(
            signing_key=settings.factory_api_key,
            failure_rate=settings.mock_factory_failure_rate,
        )

    logger.info(
        f"Factory Service: Using HttpFactoryService "
        f"({settings.env_mode.value} mode)"
    )
    return HttpFactoryService()


def reset_factory_service() -> None:
    """
    Clear the cached factory instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_factory_service.cache_clear()
    logger.debug("Factory service cache cleared")


__all__ = [
    "get_factory_service",
    "reset_factory_service",
    "BaseFactoryService",
    "FulfillmentResult",
    "HttpFactoryService",
    "MockFactoryService",
    "sign_order",
]

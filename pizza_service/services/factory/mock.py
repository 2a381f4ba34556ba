"""
Mock Pizza Factory Implementation

Simulates the pizza factory without making network calls.
Used in development mode (ENV_MODE=development) to:
    - Exercise the complete order flow locally
    - Test fulfillment failures on demand

Behavior:
    - Simulates response times within a configurable range
    - Rejects orders with probability ``failure_rate`` and returns a report link
    - Issues HS256 pizza tokens signed with the factory API key
"""

import asyncio
import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Any

import jwt

from pizza_service.services.factory.base import BaseFactoryService, FulfillmentResult, sign_order

logger = logging.getLogger(__name__)


class MockFactoryService(BaseFactoryService):
    """
    Mock implementation of the pizza factory.

    Attributes:
        signing_key: Secret used to sign pizza tokens and order signatures
        failure_rate: Probability of simulated fulfillment failure (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds

    Example:
        >>> service = MockFactoryService("secret", failure_rate=0.0)
        >>> result = await service.fulfill_order(diner, order)
        >>> print(result.success)
        True
    """

    FAILURE_REASONS = [
        ("oven_offline", "The pizza oven is offline."),
        ("out_of_dough", "The factory ran out of dough."),
        ("chaos_injected", "Chaos monkey rejected the order."),
    ]

    def __init__(
        self,
        signing_key: str,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.05,
        vendor_id: str = "jwt-pizza-mock",
    ):
        self.signing_key = signing_key
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.vendor_id = vendor_id

        logger.info(
            f"MockFactoryService initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    async def _simulate_latency(self) -> float:
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)
        return latency * 1000  # Convert to milliseconds

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    def _report_url(self) -> str:
        return f"mock://pizza-factory/report/{uuid.uuid4().hex}"

    async def fulfill_order(
        self,
        diner: dict[str, Any],
        order: dict[str, Any],
    ) -> FulfillmentResult:
        latency_ms = await self._simulate_latency()

        if self._should_fail():
            error_code, error_message = random.choice(self.FAILURE_REASONS)
            logger.debug(f"Mock: Order #{order.get('id')} rejected - {error_code}")
            return FulfillmentResult(
                success=False,
                report_url=self._report_url(),
                error_message=error_message,
                error_code=error_code,
                response_time_ms=latency_ms,
            )

        pizza_token = jwt.encode(
            {
                "vendor": {"id": self.vendor_id, "name": "Mock Pizza Factory"},
                "diner": diner,
                "order": order,
                "signature": sign_order(order, self.signing_key),
                "iat": datetime.now(timezone.utc),
            },
            self.signing_key,
            algorithm="HS256",
        )

        logger.info(f"Mock: Order #{order.get('id')} fulfilled")

        return FulfillmentResult(
            success=True,
            jwt=pizza_token,
            response_time_ms=latency_ms,
        )

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        logger.debug("Mock: Health check passed")
        return True

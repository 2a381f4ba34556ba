"""
Pizza Factory Service Abstract Base Class

Defines the interface contract for order fulfillment. Both MockFactoryService
and HttpFactoryService must implement these methods, so order placement
behaves identically regardless of which service is active.

Design Pattern: Strategy Pattern
    - Allows runtime switching between the mock and the real factory
    - Facilitates testing with the mock implementation
"""

import hashlib
import hmac
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class FulfillmentResult:
    """
    Standardized result from the pizza factory.

    Attributes:
        success: Whether the factory accepted the order
        jwt: Signed pizza token issued by the factory
        report_url: Link the factory returns for chaos reports
        error_message: Error description if fulfillment failed
        error_code: Machine-readable error code
        response_time_ms: Time taken by the factory call
    """
    success: bool
    jwt: Optional[str] = None
    report_url: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    response_time_ms: float = 0.0


def sign_order(order: dict[str, Any], key: str) -> str:
    """
    HMAC-SHA256 signature of an order payload.

    The order is serialized with sorted keys and no whitespace so the
    factory can recompute the same digest.
    """
    canonical = json.dumps(order, sort_keys=True, separators=(",", ":"), default=str)
    return hmac.new(key.encode(), canonical.encode(), hashlib.sha256).hexdigest()


class BaseFactoryService(ABC):
    """
    Abstract base class for pizza factory services.

    Example:
        >>> service = get_factory_service()  # Returns Mock or Http
        >>> result = await service.fulfill_order(diner, order)
        >>> if result.success:
        ...     print(result.jwt)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the factory provider.

        Returns:
            str: Provider name (e.g., "mock", "http")
        """

    @abstractmethod
    async def fulfill_order(
        self,
        diner: dict[str, Any],
        order: dict[str, Any],
    ) -> FulfillmentResult:
        """
        Ask the factory to make the pizzas of a persisted order.

        Args:
            diner: ``{"id", "name", "email"}`` of the ordering user
            order: Serialized order as returned to the client

        Returns:
            FulfillmentResult: Standardized result object. Failures are
            reported in the result, never raised.
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the factory.

        Returns:
            bool: True if the factory is reachable
        """

"""
HTTP Pizza Factory Implementation

Talks to the real pizza factory over HTTPS.
Used when ENV_MODE=production or ENV_MODE=staging.

Protocol:
    POST {FACTORY_URL}/api/order
    Authorization: Bearer {FACTORY_API_KEY}
    {"diner": {...}, "order": {...}, "signature": "..."}

    2xx -> {"jwt": "...", "reportUrl": "..."}
    else -> {"message": "...", "reportUrl": "..."}
"""

import logging
import time
from typing import Any, Optional

import httpx

from pizza_service.core.config import get_settings
from pizza_service.services.factory.base import BaseFactoryService, FulfillmentResult, sign_order

logger = logging.getLogger(__name__)


class HttpFactoryService(BaseFactoryService):
    """
    Pizza factory client backed by httpx.

    Every failure mode (timeout, connection error, non-2xx status or a body
    without a token) is reported as an unsuccessful FulfillmentResult.

    Example:
        >>> service = HttpFactoryService()
        >>> result = await service.fulfill_order(diner, order)
        >>> result.success, result.report_url
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.factory_url).rstrip("/")
        self.api_key = api_key or settings.factory_api_key
        self.timeout = timeout if timeout is not None else settings.factory_timeout_seconds
        self._transport = transport

        if not self.api_key:
            raise ValueError(
                "FACTORY_API_KEY is required for the HTTP pizza factory. "
                "Set it in your .env file or environment variables."
            )

        logger.info(f"HttpFactoryService initialized ({self.base_url})")

    @property
    def provider_name(self) -> str:
        return "http"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    async def fulfill_order(
        self,
        diner: dict[str, Any],
        order: dict[str, Any],
    ) -> FulfillmentResult:
        payload = {
            "diner": diner,
            "order": order,
            "signature": sign_order(order, self.api_key),
        }
        start_time = time.time()

        try:
            async with self._client() as client:
                response = await client.post("/api/order", json=payload)
        except httpx.TimeoutException:
            logger.warning(f"Factory timeout for order #{order.get('id')}")
            return FulfillmentResult(
                success=False,
                error_message="Pizza factory timed out",
                error_code="timeout",
                response_time_ms=(time.time() - start_time) * 1000,
            )
        except httpx.HTTPError as e:
            logger.error(f"Factory connection error for order #{order.get('id')}: {e}")
            return FulfillmentResult(
                success=False,
                error_message=f"Pizza factory unreachable: {e}",
                error_code="connection_error",
                response_time_ms=(time.time() - start_time) * 1000,
            )

        elapsed_ms = (time.time() - start_time) * 1000

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        report_url = body.get("reportUrl")

        if response.is_success and body.get("jwt"):
            logger.info(
                f"Factory fulfilled order #{order.get('id')} in {elapsed_ms:.0f}ms"
            )
            return FulfillmentResult(
                success=True,
                jwt=body["jwt"],
                report_url=report_url,
                response_time_ms=elapsed_ms,
            )

        logger.warning(
            f"Factory rejected order #{order.get('id')}: "
            f"HTTP {response.status_code} {body.get('message', '')}"
        )
        return FulfillmentResult(
            success=False,
            report_url=report_url,
            error_message=body.get("message") or f"HTTP {response.status_code}",
            error_code=str(response.status_code),
            response_time_ms=elapsed_ms,
        )

    async def health_check(self) -> bool:
        try:
            async with self._client() as client:
                response = await client.get("/")
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.error(f"Factory health check failed: {e}")
            return False

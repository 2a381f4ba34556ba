import json

import httpx
import jwt
import pytest

from pizza_service.core.config import get_settings
from pizza_service.services.factory import (
    HttpFactoryService,
    MockFactoryService,
    get_factory_service,
    reset_factory_service,
    sign_order,
)

DINER = {"id": 4, "name": "pizza diner", "email": "d@jwt.com"}
ORDER = {
    "id": 7,
    "franchiseId": 1,
    "storeId": 1,
    "date": "2024-06-05T05:14:40Z",
    "items": [{"id": 1, "menuId": 1, "description": "Veggie", "price": 0.05}],
}


def make_service(handler, api_key="factory-key"):
    return HttpFactoryService(
        base_url="https://factory.jwt.com/",
        api_key=api_key,
        timeout=1,
        transport=httpx.MockTransport(handler),
    )


def test_sign_order_is_key_order_independent():
    reordered = dict(reversed(list(ORDER.items())))
    assert sign_order(ORDER, "k") == sign_order(reordered, "k")
    assert sign_order(ORDER, "k") != sign_order(ORDER, "other")
    assert sign_order(ORDER, "k") != sign_order({**ORDER, "storeId": 2}, "k")


@pytest.mark.asyncio
async def test_http_fulfill(settings):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"jwt": "pizza-token", "reportUrl": "https://factory.jwt.com/report/7"})

    result = await make_service(handler).fulfill_order(DINER, ORDER)

    assert result.success
    assert result.jwt == "pizza-token"
    assert result.report_url == "https://factory.jwt.com/report/7"
    assert seen["url"] == "https://factory.jwt.com/api/order"
    assert seen["auth"] == "Bearer factory-key"
    assert seen["body"]["diner"] == DINER
    assert seen["body"]["order"] == ORDER
    assert seen["body"]["signature"] == sign_order(ORDER, "factory-key")


@pytest.mark.asyncio
async def test_http_factory_rejects(settings):
    def handler(request):
        return httpx.Response(500, json={"message": "chaos", "reportUrl": "https://factory.jwt.com/report/1"})

    result = await make_service(handler).fulfill_order(DINER, ORDER)

    assert not result.success
    assert result.jwt is None
    assert result.report_url == "https://factory.jwt.com/report/1"
    assert result.error_message == "chaos"
    assert result.error_code == "500"


@pytest.mark.asyncio
async def test_http_factory_missing_token(settings):
    def handler(request):
        return httpx.Response(200, text="not json")

    result = await make_service(handler).fulfill_order(DINER, ORDER)
    assert not result.success
    assert result.report_url is None


@pytest.mark.asyncio
async def test_http_factory_timeout(settings):
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    result = await make_service(handler).fulfill_order(DINER, ORDER)
    assert not result.success
    assert result.error_code == "timeout"


@pytest.mark.asyncio
async def test_http_factory_unreachable(settings):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    result = await make_service(handler).fulfill_order(DINER, ORDER)
    assert not result.success
    assert result.error_code == "connection_error"


@pytest.mark.asyncio
async def test_http_health_check(settings):
    assert await make_service(lambda request: httpx.Response(200)).health_check()
    assert not await make_service(lambda request: httpx.Response(503)).health_check()


@pytest.mark.asyncio
async def test_mock_factory_issues_pizza_token():
    service = MockFactoryService("factory-key", failure_rate=0.0, max_latency=0)
    result = await service.fulfill_order(DINER, ORDER)

    assert result.success
    pizza = jwt.decode(result.jwt, "factory-key", algorithms=["HS256"])
    assert pizza["diner"] == DINER
    assert pizza["order"] == ORDER
    assert pizza["signature"] == sign_order(ORDER, "factory-key")


@pytest.mark.asyncio
async def test_mock_factory_failure():
    service = MockFactoryService("factory-key", failure_rate=1.0, max_latency=0)
    result = await service.fulfill_order(DINER, ORDER)

    assert not result.success
    assert result.jwt is None
    assert result.report_url.startswith("mock://pizza-factory/report/")
    assert result.error_code in {code for code, _ in MockFactoryService.FAILURE_REASONS}


def test_factory_selection(settings, monkeypatch):
    assert isinstance(get_factory_service(), MockFactoryService)
    assert get_factory_service() is get_factory_service()

    monkeypatch.setenv("ENV_MODE", "staging")
    get_settings.cache_clear()
    reset_factory_service()
    service = get_factory_service()
    assert isinstance(service, HttpFactoryService)
    assert service.base_url == "https://factory.jwt.com"

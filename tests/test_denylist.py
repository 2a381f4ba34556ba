from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError

from pizza_service import database
from pizza_service.core.config import get_settings
from pizza_service.models import RevokedToken
from pizza_service.services.denylist import (
    DatabaseTokenDenylist,
    RedisTokenDenylist,
    get_token_denylist,
    reset_token_denylist,
)
from pizza_service.services.denylist.redis import KEY_PREFIX


@pytest_asyncio.fixture
async def db_denylist(settings):
    database.configure_engine()
    await database.init_db()
    yield DatabaseTokenDenylist()
    await database.dispose_engine()


def in_minutes(minutes):
    return datetime.now(timezone.utc) + timedelta(minutes=minutes)


@pytest.mark.asyncio
async def test_database_revoke(db_denylist):
    assert not await db_denylist.is_revoked("abc")
    await db_denylist.revoke("abc", in_minutes(5))
    assert await db_denylist.is_revoked("abc")
    assert not await db_denylist.is_revoked("other")

    # Revoking twice is harmless
    await db_denylist.revoke("abc", in_minutes(10))
    assert await db_denylist.is_revoked("abc")


@pytest.mark.asyncio
async def test_database_ignores_expired(db_denylist):
    await db_denylist.revoke("old", in_minutes(-1))
    assert not await db_denylist.is_revoked("old")


@pytest.mark.asyncio
async def test_database_prune(db_denylist):
    async with database.async_session_maker() as session:
        session.add(RevokedToken(jti="stale", expires_at=in_minutes(-5)))
        session.add(RevokedToken(jti="live", expires_at=in_minutes(5)))
        await session.commit()

    assert not await db_denylist.is_revoked("stale")
    assert await db_denylist.prune() == 1
    assert await db_denylist.prune() == 0
    assert await db_denylist.is_revoked("live")
    assert await db_denylist.health_check()


@pytest.mark.asyncio
async def test_redis_revoke():
    client = mock.AsyncMock()
    denylist = RedisTokenDenylist(client=client)

    await denylist.revoke("abc", in_minutes(5))
    client.set.assert_awaited_once()
    args, kwargs = client.set.call_args
    assert args[0] == f"{KEY_PREFIX}abc"
    assert 295 <= kwargs["ex"] <= 300

    client.exists.return_value = 1
    assert await denylist.is_revoked("abc")
    client.exists.assert_awaited_with(f"{KEY_PREFIX}abc")

    client.exists.return_value = 0
    assert not await denylist.is_revoked("other")


@pytest.mark.asyncio
async def test_redis_skips_expired():
    client = mock.AsyncMock()
    denylist = RedisTokenDenylist(client=client)
    await denylist.revoke("old", in_minutes(-1))
    client.set.assert_not_awaited()
    assert await denylist.prune() == 0


@pytest.mark.asyncio
async def test_redis_health_check():
    client = mock.AsyncMock()
    client.ping.return_value = True
    assert await RedisTokenDenylist(client=client).health_check()

    client.ping.side_effect = RedisConnectionError("down")
    assert not await RedisTokenDenylist(client=client).health_check()


def test_backend_selection(settings, monkeypatch):
    assert isinstance(get_token_denylist(), DatabaseTokenDenylist)
    assert get_token_denylist() is get_token_denylist()

    monkeypatch.setenv("TOKEN_DENYLIST_BACKEND", "redis")
    get_settings.cache_clear()
    reset_token_denylist()
    assert isinstance(get_token_denylist(), RedisTokenDenylist)

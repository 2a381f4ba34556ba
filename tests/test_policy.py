from datetime import datetime, timezone

import pytest

from pizza_service.auth import (
    AdminOnly,
    AuthenticatedUser,
    FranchiseAdminOrAdmin,
    SelfOrAdmin,
    allows,
    enforce,
    parse_id,
)
from pizza_service.core.exceptions import Forbidden
from pizza_service.core.security import TokenClaims
from pizza_service.models import Franchise, Role, User, UserRole


class FakeSession:
    """Just enough of AsyncSession for franchise lookups."""

    def __init__(self, *franchise_ids):
        self.franchises = {fid: Franchise(id=fid, name=f"franchise {fid}") for fid in franchise_ids}

    async def get(self, model, key):
        return self.franchises.get(key)


def make_user(user_id, *roles):
    user = User(
        id=user_id,
        name=f"user {user_id}",
        email=f"u{user_id}@jwt.com",
        password="x",
        roles=[UserRole(role=role, object_id=object_id) for role, object_id in roles],
    )
    claims = TokenClaims(
        user_id=user_id,
        name=user.name,
        email=user.email,
        roles=[],
        jti="jti",
        expires_at=datetime.now(timezone.utc),
    )
    return AuthenticatedUser(user=user, claims=claims, token="token")


ADMIN = make_user(1, (Role.ADMIN, None))
DINER = make_user(2, (Role.DINER, None))
FRANCHISEE = make_user(3, (Role.DINER, None), (Role.FRANCHISEE, 10))


@pytest.mark.asyncio
async def test_admin_only():
    policy = AdminOnly("unable to create a franchise")
    assert await allows(policy, ADMIN, {}, FakeSession())
    assert not await allows(policy, DINER, {}, FakeSession())
    assert not await allows(policy, FRANCHISEE, {}, FakeSession())


@pytest.mark.asyncio
async def test_self_or_admin():
    policy = SelfOrAdmin("user_id")
    assert await allows(policy, DINER, {"user_id": "2"}, FakeSession())
    assert not await allows(policy, DINER, {"user_id": "3"}, FakeSession())
    assert await allows(policy, ADMIN, {"user_id": "3"}, FakeSession())
    assert not await allows(policy, ADMIN, {"user_id": "abc"}, FakeSession())
    assert not await allows(policy, ADMIN, {"user_id": "99999999999999999999"}, FakeSession())
    assert not await allows(policy, ADMIN, {}, FakeSession())


@pytest.mark.asyncio
async def test_franchise_admin_or_admin():
    policy = FranchiseAdminOrAdmin("franchise_id", "unable to create a store")
    db = FakeSession(10, 11)
    assert await allows(policy, FRANCHISEE, {"franchise_id": "10"}, db)
    assert not await allows(policy, FRANCHISEE, {"franchise_id": "11"}, db)
    assert await allows(policy, ADMIN, {"franchise_id": "11"}, db)
    assert not await allows(policy, DINER, {"franchise_id": "10"}, db)


@pytest.mark.asyncio
async def test_missing_franchise_denied_to_everyone():
    policy = FranchiseAdminOrAdmin("franchise_id", "unable to create a store")
    db = FakeSession()
    for user in (ADMIN, DINER, FRANCHISEE):
        assert not await allows(policy, user, {"franchise_id": "10"}, db)
        assert not await allows(policy, user, {"franchise_id": "ten"}, db)
        assert not await allows(policy, user, {"franchise_id": "99999999999999999999"}, db)


@pytest.mark.asyncio
async def test_enforce_raises_policy_message():
    with pytest.raises(Forbidden) as exc_info:
        await enforce(AdminOnly("unable to add menu item"), DINER, {}, FakeSession())
    assert exc_info.value.status_code == 403
    assert exc_info.value.to_dict() == {"message": "unable to add menu item"}

    await enforce(AdminOnly("unable to add menu item"), ADMIN, {}, FakeSession())


def test_parse_id():
    assert parse_id("42") == 42
    assert parse_id(" 7 ") == 7
    assert parse_id(str(2**63 - 1)) == 2**63 - 1
    assert parse_id(str(2**63)) is None
    assert parse_id(str(-(2**63) - 1)) is None
    assert parse_id("abc") is None
    assert parse_id(None) is None

"""
Declarative route authorization.

Routes name a policy instead of checking roles inline:

    @router.post("", dependencies=[Depends(require(AdminOnly("unable to create a franchise")))])

Every policy is evaluated by ``allows``. ``require`` wraps a policy into a
FastAPI dependency that authenticates the caller first (401) and then
raises Forbidden (403) with the policy's message.
"""

from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Union

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.auth.dependencies import AuthenticatedUser, get_current_user
from pizza_service.core.exceptions import Forbidden
from pizza_service.database import get_db
from pizza_service.models import Role
from pizza_service.services.franchises import get_franchise


@dataclass(frozen=True)
class AdminOnly:
    message: str


@dataclass(frozen=True)
class SelfOrAdmin:
    """The caller is the user named by a path parameter, or an admin."""
    path_param: str
    message: str = "unauthorized"


@dataclass(frozen=True)
class FranchiseAdminOrAdmin:
    """
    The caller administers the franchise named by a path parameter, or is an
    admin. A franchise that does not exist is denied to everyone.
    """
    path_param: str
    message: str


Policy = Union[AdminOnly, SelfOrAdmin, FranchiseAdminOrAdmin]

# Row ids are signed 64-bit integers in every supported database.
MAX_ID = 2**63 - 1


def parse_id(value: Optional[str]) -> Optional[int]:
    """Path parameter as a row id, or None when it cannot name a row."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    if not -MAX_ID - 1 <= number <= MAX_ID:
        return None
    return number


def _int_param(params: Mapping[str, str], name: str) -> Optional[int]:
    return parse_id(params.get(name))


async def allows(
    policy: Policy,
    user: AuthenticatedUser,
    params: Mapping[str, str],
    db: AsyncSession,
) -> bool:
    """Evaluate a policy for a caller and the request's path parameters."""
    if isinstance(policy, AdminOnly):
        return user.is_admin

    if isinstance(policy, SelfOrAdmin):
        target = _int_param(params, policy.path_param)
        return target is not None and (user.id == target or user.is_admin)

    if isinstance(policy, FranchiseAdminOrAdmin):
        franchise_id = _int_param(params, policy.path_param)
        if franchise_id is None or await get_franchise(db, franchise_id) is None:
            return False
        return user.is_admin or user.has_role(Role.FRANCHISEE, franchise_id)

    raise TypeError(f"Unknown policy: {policy!r}")


async def enforce(
    policy: Policy,
    user: AuthenticatedUser,
    params: Mapping[str, str],
    db: AsyncSession,
) -> None:
    if not await allows(policy, user, params, db):
        raise Forbidden(policy.message)


def require(policy: Policy) -> Callable:
    """Build a dependency that returns the caller once the policy allows them."""

    async def dependency(
        request: Request,
        user: AuthenticatedUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ) -> AuthenticatedUser:
        await enforce(policy, user, request.path_params, db)
        return user

    return dependency

"""
Bearer token authentication.

``get_current_user`` resolves the caller or fails with 401; the optional
variant treats any unusable token as an anonymous caller.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.core.exceptions import Unauthenticated
from pizza_service.core.security import TokenClaims, decode_access_token
from pizza_service.database import get_db
from pizza_service.models import Role, User
from pizza_service.services.denylist import BaseTokenDenylist, get_token_denylist
from pizza_service.services.users import get_user

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """The caller behind a verified token, with roles as stored now."""
    user: User
    claims: TokenClaims
    token: str

    @property
    def id(self) -> int:
        return self.user.id

    @property
    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN)

    def has_role(self, role: Role, object_id: Optional[int] = None) -> bool:
        return any(
            assigned.role == role and (object_id is None or assigned.object_id == object_id)
            for assigned in self.user.roles
        )


async def _resolve(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: AsyncSession,
    denylist: BaseTokenDenylist,
) -> Optional[AuthenticatedUser]:
    if credentials is None:
        return None

    claims = decode_access_token(credentials.credentials)
    if claims is None:
        return None

    if await denylist.is_revoked(claims.jti):
        logger.debug(f"Rejected revoked token {claims.jti}")
        return None

    user = await get_user(db, claims.user_id)
    if user is None:
        return None

    return AuthenticatedUser(user=user, claims=claims, token=credentials.credentials)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    denylist: BaseTokenDenylist = Depends(get_token_denylist),
) -> AuthenticatedUser:
    """
    Require a valid, unrevoked bearer token for an existing user.

    Raises:
        Unauthenticated: Missing, malformed, expired, revoked or orphaned token
    """
    user = await _resolve(credentials, db, denylist)
    if user is None:
        raise Unauthenticated()
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    denylist: BaseTokenDenylist = Depends(get_token_denylist),
) -> Optional[AuthenticatedUser]:
    return await _resolve(credentials, db, denylist)

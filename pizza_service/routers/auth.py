"""
Session endpoints: register, login and logout.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.auth import AuthenticatedUser, get_current_user
from pizza_service.core.exceptions import ValidationError
from pizza_service.core.security import create_access_token
from pizza_service.database import get_db
from pizza_service.schemas import AuthResponse, LoginRequest, MessageResponse, RegisterRequest
from pizza_service.services.denylist import BaseTokenDenylist, get_token_denylist
from pizza_service.services.users import add_user, authenticate, serialize_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    summary="Register a new user",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    if not body.name or not body.email or not body.password:
        raise ValidationError("name, email, and password are required")

    user = await add_user(db, name=body.name, email=body.email, password=body.password)
    user_data = serialize_user(user)
    return {"user": user_data, "token": create_access_token(user_data)}


@router.put(
    "",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    summary="Login existing user",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    user = await authenticate(db, body.email, body.password)
    user_data = serialize_user(user)
    logger.info(f"User #{user.id} logged in")
    return {"user": user_data, "token": create_access_token(user_data)}


@router.delete(
    "",
    response_model=MessageResponse,
    summary="Logout a user",
)
async def logout(
    current: AuthenticatedUser = Depends(get_current_user),
    denylist: BaseTokenDenylist = Depends(get_token_denylist),
) -> MessageResponse:
    await denylist.revoke(current.claims.jti, current.claims.expires_at)
    logger.info(f"User #{current.id} logged out")
    return MessageResponse(message="logout successful")

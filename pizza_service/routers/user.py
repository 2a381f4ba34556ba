"""
User profile endpoints.

Listing and deleting users are placeholders that answer with a fixed
"not implemented" body.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.auth import AuthenticatedUser, SelfOrAdmin, get_current_user, require
from pizza_service.core.security import create_access_token
from pizza_service.database import get_db
from pizza_service.schemas import AuthResponse, MessageResponse, UserListResponse, UserOut, UserUpdate
from pizza_service.services.users import serialize_user, update_user

router = APIRouter(prefix="/api/user", tags=["User"])

NOT_IMPLEMENTED = "not implemented"


@router.get(
    "/me",
    response_model=UserOut,
    response_model_exclude_none=True,
    summary="Get authenticated user",
)
async def get_me(current: AuthenticatedUser = Depends(get_current_user)) -> dict:
    return serialize_user(current.user)


@router.put(
    "/{user_id}",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    summary="Update user",
)
async def update(
    user_id: int,
    body: UserUpdate,
    current: AuthenticatedUser = Depends(require(SelfOrAdmin("user_id"))),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Update a profile and issue a fresh token for it. Earlier tokens stay valid."""
    user = await update_user(
        db,
        user_id,
        name=body.name,
        email=body.email,
        password=body.password,
    )
    user_data = serialize_user(user)
    return {"user": user_data, "token": create_access_token(user_data)}


@router.get(
    "",
    response_model=UserListResponse,
    summary="Gets a list of users",
)
async def list_users(current: AuthenticatedUser = Depends(get_current_user)) -> UserListResponse:
    return UserListResponse(message=NOT_IMPLEMENTED, users=[], more=False)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete user",
)
async def delete_user(
    user_id: str,
    current: AuthenticatedUser = Depends(get_current_user),
) -> MessageResponse:
    return MessageResponse(message=NOT_IMPLEMENTED)

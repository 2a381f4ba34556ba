"""
Franchise and store endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.auth import (
    AdminOnly,
    AuthenticatedUser,
    FranchiseAdminOrAdmin,
    SelfOrAdmin,
    allows,
    get_current_user,
    get_optional_user,
    parse_id,
    require,
)
from pizza_service.database import get_db
from pizza_service.schemas import (
    FranchiseCreate,
    FranchiseListResponse,
    FranchiseOut,
    MessageResponse,
    StoreCreate,
    StoreCreateResponse,
)
from pizza_service.services import franchises

router = APIRouter(prefix="/api/franchise", tags=["Franchise"])

@router.get(
    "",
    response_model=FranchiseListResponse,
    response_model_exclude_none=True,
    summary="List all the franchises",
)
async def list_franchises(
    page: int = Query(0, ge=0),
    limit: int = Query(10, ge=1),
    name: str = Query("*"),
    current: Optional[AuthenticatedUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Public listing. Admin callers also see franchise admins and store revenue."""
    detailed = current is not None and current.is_admin
    items, more = await franchises.list_franchises(db, page=page, limit=limit, name=name, detailed=detailed)
    return {"franchises": items, "more": more}


@router.get(
    "/{user_id}",
    response_model=list[FranchiseOut],
    response_model_exclude_none=True,
    summary="List a user's franchises",
)
async def list_user_franchises(
    user_id: str,
    request: Request,
    current: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list:
    """Franchises administered by a user; empty unless the caller is that user or an admin."""
    if not await allows(SelfOrAdmin("user_id"), current, request.path_params, db):
        return []
    return await franchises.get_user_franchises(db, int(user_id))


@router.post(
    "",
    response_model=FranchiseOut,
    response_model_exclude_none=True,
    summary="Create a new franchise",
)
async def create_franchise(
    body: FranchiseCreate,
    current: AuthenticatedUser = Depends(require(AdminOnly("unable to create a franchise"))),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await franchises.create_franchise(db, body.name, (admin.email for admin in body.admins))


@router.delete(
    "/{franchise_id}",
    response_model=MessageResponse,
    summary="Delete a franchise",
)
async def delete_franchise(
    franchise_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    franchise_key = parse_id(franchise_id)
    if franchise_key is not None:
        await franchises.delete_franchise(db, franchise_key)
    return MessageResponse(message="franchise deleted")


@router.post(
    "/{franchise_id}/store",
    response_model=StoreCreateResponse,
    summary="Create a new franchise store",
)
async def create_store(
    franchise_id: int,
    body: StoreCreate,
    current: AuthenticatedUser = Depends(
        require(FranchiseAdminOrAdmin("franchise_id", "unable to create a store"))
    ),
    db: AsyncSession = Depends(get_db),
) -> StoreCreateResponse:
    store = await franchises.create_store(db, franchise_id, body.name)
    return StoreCreateResponse(id=store.id, franchise_id=store.franchise_id, name=store.name)


@router.delete(
    "/{franchise_id}/store/{store_id}",
    response_model=MessageResponse,
    summary="Delete a store",
)
async def delete_store(
    franchise_id: int,
    store_id: str,
    current: AuthenticatedUser = Depends(
        require(FranchiseAdminOrAdmin("franchise_id", "unable to delete a store"))
    ),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    store_key = parse_id(store_id)
    if store_key is not None:
        await franchises.delete_store(db, franchise_id, store_key)
    return MessageResponse(message="store deleted")

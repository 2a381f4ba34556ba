"""
Menu and order endpoints.

Placing an order persists it first and then asks the pizza factory for a
signed pizza token. A factory failure is reported as a 500 but the order
stays on record.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.auth import AdminOnly, AuthenticatedUser, get_current_user, require
from pizza_service.core.config import get_settings
from pizza_service.core.exceptions import DependencyFailure, ValidationError
from pizza_service.database import get_db
from pizza_service.schemas import (
    MenuItemCreate,
    MenuItemOut,
    OrderCreate,
    OrderCreateResponse,
    OrderHistoryResponse,
    OrderOut,
)
from pizza_service.services import orders
from pizza_service.services.factory import BaseFactoryService, get_factory_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/order", tags=["Order"])


@router.get(
    "/menu",
    response_model=list[MenuItemOut],
    summary="Get the pizza menu",
)
async def get_menu(db: AsyncSession = Depends(get_db)) -> list:
    return await orders.get_menu(db)


@router.put(
    "/menu",
    response_model=list[MenuItemOut],
    summary="Add an item to the menu",
)
async def add_menu_item(
    body: MenuItemCreate,
    current: AuthenticatedUser = Depends(require(AdminOnly("unable to add menu item"))),
    db: AsyncSession = Depends(get_db),
) -> list:
    return await orders.add_menu_item(db, body)


@router.get(
    "",
    response_model=OrderHistoryResponse,
    summary="Get the orders for the authenticated user",
)
async def get_orders(
    page: Optional[str] = Query(None),
    current: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> OrderHistoryResponse:
    """
    One page of the caller's orders, newest first.

    ``page`` is echoed back exactly as it was sent (a string), or as the
    integer 1 when omitted.
    """
    page_number = 1
    if page is not None:
        try:
            page_number = int(page)
        except ValueError:
            page_number = 0
        if page_number < 1:
            raise ValidationError("page must be a positive integer")

    diner_orders = await orders.get_orders(
        db,
        current.id,
        page=page_number,
        per_page=get_settings().orders_per_page,
    )
    return OrderHistoryResponse(
        diner_id=current.id,
        orders=[OrderOut.model_validate(order) for order in diner_orders],
        page=page if page is not None else 1,
    )


@router.post(
    "",
    response_model=OrderCreateResponse,
    response_model_exclude_none=True,
    summary="Create an order for the authenticated user",
)
async def create_order(
    body: OrderCreate,
    current: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    factory: BaseFactoryService = Depends(get_factory_service),
) -> OrderCreateResponse:
    diner_order = await orders.create_order(db, current.id, body)
    order_out = OrderOut.model_validate(diner_order)

    diner = {"id": current.user.id, "name": current.user.name, "email": current.user.email}
    result = await factory.fulfill_order(diner, order_out.model_dump(mode="json", by_alias=True))

    if not result.success:
        logger.warning(
            f"Order #{diner_order.id} persisted but not fulfilled: "
            f"{result.error_code} {result.error_message}"
        )
        raise DependencyFailure(
            "Failed to fulfill order at factory",
            followLinkToEndChaos=result.report_url,
        )

    logger.info(
        f"Order #{diner_order.id} fulfilled by {factory.provider_name} factory "
        f"in {result.response_time_ms:.0f}ms"
    )
    return OrderCreateResponse(
        order=order_out,
        jwt=result.jwt,
        follow_link_to_end_chaos=result.report_url,
    )

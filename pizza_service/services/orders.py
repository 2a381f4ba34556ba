"""
Menu and diner orders.
"""

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.core.exceptions import DependencyFailure
from pizza_service.models import DinerOrder, MenuItem, OrderItem, utcnow
from pizza_service.schemas import MenuItemCreate, OrderCreate

logger = logging.getLogger(__name__)


async def get_menu(db: AsyncSession) -> list[MenuItem]:
    result = await db.execute(select(MenuItem).order_by(MenuItem.id))
    return list(result.scalars().all())


async def add_menu_item(db: AsyncSession, item: MenuItemCreate) -> list[MenuItem]:
    """Append an item to the menu and return the whole menu."""
    menu_item = MenuItem(
        title=item.title,
        description=item.description,
        image=item.image,
        price=item.price,
    )
    db.add(menu_item)
    await db.commit()
    logger.info(f"Menu item #{menu_item.id} '{item.title}' added")
    return await get_menu(db)


async def get_orders(db: AsyncSession, diner_id: int, page: int = 1, per_page: int = 10) -> list[DinerOrder]:
    """One page of a diner's orders, newest first. Pages start at 1."""
    result = await db.execute(
        select(DinerOrder)
        .where(DinerOrder.diner_id == diner_id)
        .order_by(DinerOrder.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    return list(result.scalars().all())


async def _check_menu_ids(db: AsyncSession, menu_ids: Iterable[int]) -> None:
    menu_ids = set(menu_ids)
    result = await db.execute(select(MenuItem.id).where(MenuItem.id.in_(menu_ids)))
    missing = menu_ids - set(result.scalars().all())
    if missing:
        raise DependencyFailure(f"unknown menu item {min(missing)}")


async def create_order(db: AsyncSession, diner_id: int, order: OrderCreate) -> DinerOrder:
    """
    Persist a diner order.

    The order is committed before the factory is contacted, so it survives
    a failed fulfillment.

    Raises:
        DependencyFailure: An item references a menu id that does not exist
    """
    await _check_menu_ids(db, (item.menu_id for item in order.items))

    diner_order = DinerOrder(
        diner_id=diner_id,
        franchise_id=order.franchise_id,
        store_id=order.store_id,
        date=utcnow(),
        items=[
            OrderItem(menu_id=item.menu_id, description=item.description, price=item.price)
            for item in order.items
        ],
    )
    db.add(diner_order)
    await db.commit()

    logger.info(
        f"Order #{diner_order.id} placed by diner #{diner_id} "
        f"at store #{order.store_id} ({len(order.items)} item(s))"
    )
    return diner_order

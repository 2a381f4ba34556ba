"""
Franchises and their stores.

Franchise admins are not a column of their own: a user administers a
franchise when they hold a ``franchisee`` role whose ``object_id`` is the
franchise id.
"""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.core.exceptions import NotFound, ValidationError
from pizza_service.models import DinerOrder, Franchise, OrderItem, Role, Store, User, UserRole
from pizza_service.services.users import get_user_by_email

logger = logging.getLogger(__name__)


LIKE_ESCAPE = "\\"


def name_pattern(name: str) -> str:
    """Translate a name filter into a LIKE pattern; only ``*`` matches anything."""
    for char in (LIKE_ESCAPE, "%", "_"):
        name = name.replace(char, LIKE_ESCAPE + char)
    return f"%{name.replace('*', '%')}%"


async def get_franchise(db: AsyncSession, franchise_id: int) -> Optional[Franchise]:
    return await db.get(Franchise, franchise_id)


async def franchise_admins(db: AsyncSession, franchise_ids: Iterable[int]) -> dict[int, list[dict[str, Any]]]:
    """Admins of each franchise, in the order they were granted the role."""
    franchise_ids = list(franchise_ids)
    admins: dict[int, list[dict[str, Any]]] = {franchise_id: [] for franchise_id in franchise_ids}
    if not franchise_ids:
        return admins

    result = await db.execute(
        select(UserRole.object_id, User.id, User.name, User.email)
        .join(User, User.id == UserRole.user_id)
        .where(UserRole.role == Role.FRANCHISEE, UserRole.object_id.in_(franchise_ids))
        .order_by(UserRole.id)
    )
    for franchise_id, user_id, name, email in result.all():
        admins[franchise_id].append({"id": user_id, "name": name, "email": email})
    return admins


async def store_revenue(db: AsyncSession, store_ids: Iterable[int]) -> dict[int, float]:
    """Sum of order item prices per store."""
    store_ids = list(store_ids)
    revenue = {store_id: 0.0 for store_id in store_ids}
    if not store_ids:
        return revenue

    result = await db.execute(
        select(DinerOrder.store_id, func.sum(OrderItem.price))
        .join(OrderItem, OrderItem.order_id == DinerOrder.id)
        .where(DinerOrder.store_id.in_(store_ids))
        .group_by(DinerOrder.store_id)
    )
    for store_id, total in result.all():
        revenue[store_id] = float(total or 0)
    return revenue


async def _detailed(db: AsyncSession, franchises: list[Franchise]) -> list[dict[str, Any]]:
    admins = await franchise_admins(db, [franchise.id for franchise in franchises])
    revenue = await store_revenue(db, [store.id for franchise in franchises for store in franchise.stores])
    return [
        {
            "id": franchise.id,
            "name": franchise.name,
            "admins": admins[franchise.id],
            "stores": [
                {"id": store.id, "name": store.name, "total_revenue": revenue[store.id]}
                for store in franchise.stores
            ],
        }
        for franchise in franchises
    ]


def _summary(franchise: Franchise) -> dict[str, Any]:
    return {
        "id": franchise.id,
        "name": franchise.name,
        "stores": [{"id": store.id, "name": store.name} for store in franchise.stores],
    }


async def list_franchises(
    db: AsyncSession,
    page: int = 0,
    limit: int = 10,
    name: str = "*",
    detailed: bool = False,
) -> tuple[list[dict[str, Any]], bool]:
    """
    One page of franchises matching a name filter.

    Args:
        page: Zero-based page number
        limit: Franchises per page
        name: Substring filter; ``*`` is a wildcard
        detailed: Include admins and store revenue (admin callers)

    Returns:
        (franchises, more) where ``more`` tells whether another page exists
    """
    result = await db.execute(
        select(Franchise)
        .where(Franchise.name.like(name_pattern(name), escape=LIKE_ESCAPE))
        .order_by(Franchise.id)
        .offset(page * limit)
        .limit(limit + 1)
    )
    franchises = list(result.scalars().all())
    more = len(franchises) > limit
    franchises = franchises[:limit]

    if detailed:
        return await _detailed(db, franchises), more
    return [_summary(franchise) for franchise in franchises], more


async def get_user_franchises(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    """Every franchise the user administers, with admins and store revenue."""
    franchise_ids = select(UserRole.object_id).where(
        UserRole.user_id == user_id,
        UserRole.role == Role.FRANCHISEE,
    )
    result = await db.execute(
        select(Franchise).where(Franchise.id.in_(franchise_ids)).order_by(Franchise.id)
    )
    return await _detailed(db, list(result.scalars().all()))


async def create_franchise(db: AsyncSession, name: str, admin_emails: Iterable[str]) -> dict[str, Any]:
    """
    Create a franchise and make each listed user one of its admins.

    Raises:
        NotFound: An admin email does not belong to any user
        ValidationError: A franchise with this name already exists
    """
    admins: list[User] = []
    for email in dict.fromkeys(admin_emails):
        user = await get_user_by_email(db, email)
        if user is None:
            raise NotFound(f"unknown user for franchise admin {email} provided")
        admins.append(user)

    existing = await db.execute(select(Franchise.id).where(Franchise.name == name))
    if existing.first() is not None:
        raise ValidationError(f"franchise {name} already exists")

    franchise = Franchise(name=name, stores=[])
    db.add(franchise)
    try:
        await db.flush()
        for user in admins:
            user.roles.append(UserRole(role=Role.FRANCHISEE, object_id=franchise.id))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError(f"franchise {name} already exists")

    logger.info(f"Franchise #{franchise.id} '{name}' created with {len(admins)} admin(s)")
    return {
        "id": franchise.id,
        "name": franchise.name,
        "admins": [{"id": user.id, "name": user.name, "email": user.email} for user in admins],
    }


async def delete_franchise(db: AsyncSession, franchise_id: int) -> None:
    """Delete a franchise with its stores and admin roles. Missing ids are ignored."""
    await db.execute(delete(Store).where(Store.franchise_id == franchise_id))
    await db.execute(
        delete(UserRole).where(
            UserRole.role == Role.FRANCHISEE,
            UserRole.object_id == franchise_id,
        )
    )
    await db.execute(delete(Franchise).where(Franchise.id == franchise_id))
    await db.commit()
    logger.info(f"Franchise #{franchise_id} deleted")


async def create_store(db: AsyncSession, franchise_id: int, name: str) -> Store:
    store = Store(franchise_id=franchise_id, name=name)
    db.add(store)
    await db.commit()
    logger.info(f"Store #{store.id} '{name}' created in franchise #{franchise_id}")
    return store


async def delete_store(db: AsyncSession, franchise_id: int, store_id: int) -> None:
    await db.execute(delete(Store).where(Store.franchise_id == franchise_id, Store.id == store_id))
    await db.commit()
    logger.info(f"Store #{store_id} deleted from franchise #{franchise_id}")

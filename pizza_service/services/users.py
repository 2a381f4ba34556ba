"""
User accounts and role assignments.
"""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pizza_service.core.config import Settings
from pizza_service.core.exceptions import NotFound, ValidationError
from pizza_service.core.security import get_password_hash, verify_password
from pizza_service.models import Role, User, UserRole

logger = logging.getLogger(__name__)


def serialize_role(role: UserRole) -> dict[str, Any]:
    data: dict[str, Any] = {"role": role.role.value}
    if role.object_id is not None:
        data["objectId"] = role.object_id
    return data


def serialize_user(user: User) -> dict[str, Any]:
    """Public view of a user, also used as the session token payload."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "roles": [serialize_role(role) for role in user.roles],
    }


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Look up a user by email, ignoring case."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def add_user(
    db: AsyncSession,
    name: str,
    email: str,
    password: str,
    roles: Optional[Iterable[tuple[Role, Optional[int]]]] = None,
) -> User:
    """
    Create a user with a hashed password.

    Args:
        roles: ``(role, object_id)`` pairs; a single diner role by default

    Raises:
        ValidationError: The email address is already registered
    """
    if await get_user_by_email(db, email) is not None:
        raise ValidationError("email already registered")

    roles = list(roles) if roles is not None else [(Role.DINER, None)]
    user = User(
        name=name,
        email=email,
        password=get_password_hash(password),
        roles=[UserRole(role=role, object_id=object_id) for role, object_id in roles],
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("email already registered")

    logger.info(f"User #{user.id} registered ({email})")
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """
    Resolve a user from login credentials.

    Raises:
        NotFound: Unknown email or wrong password. Both cases share one
            message so the response does not reveal which accounts exist.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password):
        raise NotFound("unknown user")
    return user


async def update_user(
    db: AsyncSession,
    user_id: int,
    name: Optional[str] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> User:
    """
    Apply a partial profile update. Omitted fields keep their stored values.

    Raises:
        NotFound: No user with this id
        ValidationError: The new email belongs to another user
    """
    user = await get_user(db, user_id)
    if user is None:
        raise NotFound("unknown user")

    if email is not None and email != user.email:
        existing = await get_user_by_email(db, email)
        if existing is not None and existing.id != user.id:
            raise ValidationError("email already registered")
        user.email = email
    if name is not None:
        user.name = name
    if password is not None:
        user.password = get_password_hash(password)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("email already registered")

    logger.info(f"User #{user.id} updated")
    return user


async def ensure_default_admin(db: AsyncSession, settings: Settings) -> Optional[User]:
    """
    Seed the configured admin account when the database has no admin yet.

    Returns:
        The created admin, or None when nothing was seeded
    """
    if not settings.default_admin_password:
        return None

    result = await db.execute(select(UserRole.id).where(UserRole.role == Role.ADMIN).limit(1))
    if result.first() is not None:
        return None

    existing = await get_user_by_email(db, settings.default_admin_email)
    if existing is not None:
        existing.roles.append(UserRole(role=Role.ADMIN))
        await db.commit()
        logger.info(f"Granted admin role to {existing.email}")
        return existing

    admin = await add_user(
        db,
        name=settings.default_admin_name,
        email=settings.default_admin_email,
        password=settings.default_admin_password,
        roles=[(Role.ADMIN, None)],
    )
    logger.info(f"Seeded default admin {admin.email}")
    return admin

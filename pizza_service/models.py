"""
SQLAlchemy Database Models

Relational model of the pizza service:
- Users and their role assignments
- Franchises and their stores
- The shared menu
- Diner orders and their line items
- Revoked session tokens
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from pizza_service.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    """Roles a user can hold. Franchisee roles are scoped to one franchise."""
    ADMIN = "admin"
    DINER = "diner"
    FRANCHISEE = "franchisee"


class User(Base):
    """A registered diner, franchisee or admin."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash

    roles = relationship(
        "UserRole",
        back_populates="user",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="UserRole.id",
    )

    def __repr__(self):
        return f"<User #{self.id} - {self.email}>"


class UserRole(Base):
    """
    One role held by a user.

    ``object_id`` is the franchise id for franchisee roles and NULL otherwise.
    """
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(Role), nullable=False)
    object_id = Column(Integer, nullable=True, index=True)

    user = relationship("User", back_populates="roles")

    def __repr__(self):
        return f"<UserRole {self.role.value}({self.object_id}) user={self.user_id}>"


class Franchise(Base):
    __tablename__ = "franchises"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)

    stores = relationship("Store", back_populates="franchise", lazy="selectin", order_by="Store.id")

    def __repr__(self):
        return f"<Franchise #{self.id} - {self.name}>"


class Store(Base):
    __tablename__ = "stores"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    franchise_id = Column(Integer, ForeignKey("franchises.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)

    franchise = relationship("Franchise", back_populates="stores")

    def __repr__(self):
        return f"<Store #{self.id} - {self.name} (franchise {self.franchise_id})>"


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String(1024), nullable=False)
    price = Column(Float, nullable=False)

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.title} - {self.price}>"


class DinerOrder(Base):
    """
    An order placed by a diner at one store.

    Franchise and store ids are recorded as given; orders outlive the
    franchise or store they were placed at.
    """
    __tablename__ = "diner_orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    diner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    franchise_id = Column(Integer, nullable=False, index=True)
    store_id = Column(Integer, nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<DinerOrder #{self.id} - diner {self.diner_id} - store {self.store_id}>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("diner_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False)
    description = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)

    order = relationship("DinerOrder", back_populates="items")


class RevokedToken(Base):
    """A logged-out session token, kept until the token would have expired."""
    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

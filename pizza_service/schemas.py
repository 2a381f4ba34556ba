"""
Pydantic Schemas for Request/Response Validation

The public API speaks camelCase JSON (``franchiseId``, ``totalRevenue``);
fields are declared in snake_case and aliased by ``CamelModel``.
"""

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from pizza_service.models import Role


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class RegisterRequest(CamelModel):
    """Registration body. Presence of every field is checked by the route."""
    name: Optional[str] = Field(None, max_length=255, examples=["pizza diner"])
    email: Optional[EmailStr] = Field(None, examples=["d@jwt.com"])
    password: Optional[str] = Field(None, examples=["diner"])


class LoginRequest(CamelModel):
    email: str = Field(..., examples=["d@jwt.com"])
    password: str = Field(..., examples=["diner"])


class UserUpdate(CamelModel):
    """Partial profile update; omitted fields keep their stored values."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1)


class FranchiseAdminRef(CamelModel):
    email: str = Field(..., min_length=1, examples=["f@jwt.com"])


class FranchiseCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["pizzaPocket"])
    admins: List[FranchiseAdminRef] = Field(..., min_length=1)


class StoreCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["SLC"])


class MenuItemCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255, examples=["Student"])
    description: str = Field(..., min_length=1, examples=["No topping, no sauce, just carbs"])
    image: str = Field(..., min_length=1, max_length=1024, examples=["pizza9.png"])
    price: float = Field(..., ge=0, examples=[0.0001])


class OrderItemCreate(CamelModel):
    """Single item in an order."""
    menu_id: int = Field(..., gt=0, examples=[1])
    description: str = Field(..., min_length=1, max_length=255, examples=["Veggie"])
    price: float = Field(..., ge=0, examples=[0.05])


class OrderCreate(CamelModel):
    """Request schema for placing an order."""
    franchise_id: int = Field(..., gt=0, examples=[1])
    store_id: int = Field(..., gt=0, examples=[1])
    items: List[OrderItemCreate] = Field(..., min_length=1)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class RoleOut(CamelModel):
    role: Role
    object_id: Optional[int] = None


class UserOut(CamelModel):
    id: int
    name: str
    email: str
    roles: List[RoleOut]


class AuthResponse(CamelModel):
    user: UserOut
    token: str


class MessageResponse(CamelModel):
    message: str


class UserListResponse(CamelModel):
    message: str
    users: List[UserOut] = []
    more: bool = False


class AdminOut(CamelModel):
    id: int
    name: str
    email: str


class StoreOut(CamelModel):
    id: int
    name: str
    total_revenue: Optional[float] = None


class FranchiseOut(CamelModel):
    id: int
    name: str
    admins: Optional[List[AdminOut]] = None
    stores: Optional[List[StoreOut]] = None


class FranchiseListResponse(CamelModel):
    franchises: List[FranchiseOut]
    more: bool


class StoreCreateResponse(CamelModel):
    id: int
    franchise_id: int
    name: str


class MenuItemOut(CamelModel):
    id: int
    title: str
    description: str
    image: str
    price: float


class OrderItemOut(CamelModel):
    id: int
    menu_id: int
    description: str
    price: float


class OrderOut(CamelModel):
    id: int
    franchise_id: int
    store_id: int
    date: datetime
    items: List[OrderItemOut]


class OrderHistoryResponse(CamelModel):
    """A page of the caller's orders. ``page`` echoes the query string."""
    diner_id: int
    orders: List[OrderOut]
    page: Union[int, str]


class OrderCreateResponse(CamelModel):
    order: OrderOut
    jwt: str
    follow_link_to_end_chaos: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    token_denylist: str
    factory_service: str
    timestamp: datetime


class DocsEndpoint(BaseModel):
    method: str
    path: str
    requiresAuth: bool
    description: Optional[str] = None


class DocsResponse(BaseModel):
    version: str
    endpoints: List[DocsEndpoint]
    config: dict[str, Any]

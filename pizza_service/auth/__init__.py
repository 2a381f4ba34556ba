from pizza_service.auth.dependencies import AuthenticatedUser, get_current_user, get_optional_user
from pizza_service.auth.policy import (
    AdminOnly,
    FranchiseAdminOrAdmin,
    Policy,
    SelfOrAdmin,
    allows,
    enforce,
    parse_id,
    require,
)

__all__ = [
    "AuthenticatedUser",
    "get_current_user",
    "get_optional_user",
    "AdminOnly",
    "FranchiseAdminOrAdmin",
    "Policy",
    "SelfOrAdmin",
    "allows",
    "enforce",
    "parse_id",
    "require",
]

"""
Core module - data models and shared helpers.

This module contains:
- models: Stored entities (User, Item, CartItem) and response projections
- utils: Shared utility functions
"""

from storefront.core.models import (
    Permission,
    User,
    UserResponse,
    SessionUser,
    Item,
    ItemCreate,
    ItemPatch,
    ItemSummary,
    CartItem,
    SuccessMessage,
    ItemsConnection,
)

from storefront.core.utils import (
    generate_id,
    utc_now,
)

__all__ = [
    # Models
    "Permission",
    "User",
    "UserResponse",
    "SessionUser",
    "Item",
    "ItemCreate",
    "ItemPatch",
    "ItemSummary",
    "CartItem",
    "SuccessMessage",
    "ItemsConnection",
    # Utils
    "generate_id",
    "utc_now",
]

"""
Core data models for the storefront.

These models represent the stored entities (Users, Items, CartItems)
and the projections handed back to clients. Stored records carry
sensitive fields; response models never do.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.core.utils import generate_id, utc_now


# =============================================================================
# Enums
# =============================================================================


class Permission(str, Enum):
    """Capability labels attached to a user."""

    ADMIN = "ADMIN"
    USER = "USER"
    ITEMCREATE = "ITEMCREATE"
    ITEMUPDATE = "ITEMUPDATE"
    ITEMDELETE = "ITEMDELETE"
    PERMISSIONUPDATE = "PERMISSIONUPDATE"


# =============================================================================
# User
# =============================================================================


class User(BaseModel):
    """
    A registered shopper.

    `password` holds the bcrypt hash, never the plaintext. The reset
    fields are only set between a reset request and its use.
    """

    id: str = Field(default_factory=lambda: generate_id("user"))
    email: str
    name: str
    password: str

    permissions: list[Permission] = Field(default_factory=lambda: [Permission.USER])

    reset_token: str | None = None
    reset_token_expiry: datetime | None = None

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class UserResponse(BaseModel):
    """User data returned to client (no sensitive fields)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    permissions: list[Permission]


class SessionUser(BaseModel):
    """Minimal projection attached to each request by the session middleware."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    permissions: list[Permission]


# =============================================================================
# Item
# =============================================================================


class Item(BaseModel):
    """A product for sale. `user_id` is the owner and never changes."""

    id: str = Field(default_factory=lambda: generate_id("item"))
    title: str
    description: str
    image: str | None = None
    large_image: str | None = None
    price: int = Field(ge=0)  # cents

    user_id: str

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ItemCreate(BaseModel):
    """Fields a caller may supply when creating an item."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    description: str
    image: str | None = None
    large_image: str | None = None
    price: int = Field(ge=0)


class ItemPatch(BaseModel):
    """
    Partial update for an item.

    Only these fields can ever be written through an update; anything
    else (id, owner, timestamps) is rejected at validation time.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    image: str | None = None
    large_image: str | None = None
    price: int | None = Field(default=None, ge=0)

    @field_validator("title", "description", "price")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    def changes(self) -> dict[str, Any]:
        """The fields the caller actually sent, explicit nulls included."""
        return self.model_dump(exclude_unset=True)


class ItemSummary(BaseModel):
    """What a delete hands back: the item as it was."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    user_id: str


# =============================================================================
# Cart
# =============================================================================


class CartItem(BaseModel):
    """One line in a user's cart. At most one per (user, item) pair."""

    id: str = Field(default_factory=lambda: generate_id("cart"))
    user_id: str
    item_id: str
    quantity: int = Field(default=1, ge=1)

    created_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Misc payloads
# =============================================================================


class SuccessMessage(BaseModel):
    message: str


class ItemsConnection(BaseModel):
    count: int

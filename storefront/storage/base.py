"""
Storage abstraction layer.

All persistence goes through this interface. Resolvers only talk to a
Store, so the in-memory development store can be swapped for a real
database binding without touching resolver code.

Contract for implementations:
- Records are returned as copies; mutating a returned model never
  changes stored state.
- `create_user` enforces unique emails and `create_cart_item` enforces
  one row per (user, item), both by raising DuplicateRecord.
- `increment_cart_item` is atomic with respect to other calls.
- `consume_reset_token` and `clear_reset_token` check the stored token
  and write in one step, so a token is used or cleared at most once.
- Update methods return the updated record, or None if it is missing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from storefront.core.models import CartItem, Item, User


class Store(ABC):
    """
    Async store for users, items and cart items.

    Local Implementation: in-memory (storefront.storage.local)
    """

    # =========================================================================
    # Users
    # =========================================================================

    @abstractmethod
    async def find_user_by_email(self, email: str) -> User | None:
        """Get a user by (lowercase) email."""
        pass

    @abstractmethod
    async def find_user_by_id(self, user_id: str) -> User | None:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def find_user_by_reset_token(
        self,
        reset_token: str,
        expiry_gte: datetime,
    ) -> User | None:
        """Get the user holding exactly this reset token with expiry >= expiry_gte."""
        pass

    @abstractmethod
    async def list_users(self) -> list[User]:
        """All users, oldest first."""
        pass

    @abstractmethod
    async def create_user(self, user: User) -> User:
        """Persist a new user. Raises DuplicateRecord on an existing email."""
        pass

    @abstractmethod
    async def update_user(self, user_id: str, data: dict[str, Any]) -> User | None:
        """Apply a partial update to a user in one write."""
        pass

    @abstractmethod
    async def consume_reset_token(
        self,
        reset_token: str,
        expiry_gte: datetime,
        data: dict[str, Any],
    ) -> User | None:
        """
        Redeem a reset token.

        If a user holds exactly this token with expiry >= expiry_gte, apply
        `data`, clear both reset fields and return the user. Otherwise
        return None and write nothing.
        """
        pass

    @abstractmethod
    async def clear_reset_token(self, user_id: str, reset_token: str) -> bool:
        """Clear the reset fields only if the user still holds this token."""
        pass

    # =========================================================================
    # Items
    # =========================================================================

    @abstractmethod
    async def find_item(self, item_id: str) -> Item | None:
        """Get an item by ID."""
        pass

    @abstractmethod
    async def list_items(
        self,
        skip: int = 0,
        first: int | None = None,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> list[Item]:
        """Page through items."""
        pass

    @abstractmethod
    async def count_items(self) -> int:
        """Total number of items."""
        pass

    @abstractmethod
    async def create_item(self, item: Item) -> Item:
        """Persist a new item."""
        pass

    @abstractmethod
    async def update_item(self, item_id: str, data: dict[str, Any]) -> Item | None:
        """Apply a partial update to an item."""
        pass

    @abstractmethod
    async def delete_item(self, item_id: str) -> bool:
        """Delete an item (and any cart rows pointing at it)."""
        pass

    # =========================================================================
    # Cart
    # =========================================================================

    @abstractmethod
    async def find_cart_item(self, user_id: str, item_id: str) -> CartItem | None:
        """Get the cart row for a (user, item) pair."""
        pass

    @abstractmethod
    async def get_cart_item(self, cart_item_id: str) -> CartItem | None:
        """Get a cart row by ID."""
        pass

    @abstractmethod
    async def list_cart_items(self, user_id: str) -> list[CartItem]:
        """A user's cart, oldest first."""
        pass

    @abstractmethod
    async def create_cart_item(self, cart_item: CartItem) -> CartItem:
        """Persist a new cart row. Raises DuplicateRecord if the pair exists."""
        pass

    @abstractmethod
    async def increment_cart_item(self, cart_item_id: str, by: int = 1) -> CartItem | None:
        """Atomically add `by` to a cart row's quantity."""
        pass

    @abstractmethod
    async def delete_cart_item(self, cart_item_id: str) -> bool:
        """Delete a cart row."""
        pass

"""
Local storage implementation for development and tests.

An in-memory store that works without any external services. Every
mutation runs under a single asyncio.Lock, which is what makes the
read-modify-write operations (cart increments, unique inserts) atomic.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

from storefront.core.models import CartItem, Item, User
from storefront.core.utils import utc_now
from storefront.errors import DuplicateRecord
from storefront.storage.base import Store


ITEM_ORDER_FIELDS = ("created_at", "price", "title")


class InMemoryStore(Store):
    """In-memory document storage for development."""

    def __init__(self):
        self._users: dict[str, User] = {}
        self._users_by_email: dict[str, str] = {}  # email -> user_id
        self._items: dict[str, Item] = {}
        self._cart: dict[str, CartItem] = {}
        self._lock = asyncio.Lock()

    # =========================================================================
    # Users
    # =========================================================================

    async def find_user_by_email(self, email: str) -> User | None:
        user_id = self._users_by_email.get(email)
        return self._copy(self._users.get(user_id)) if user_id else None

    async def find_user_by_id(self, user_id: str) -> User | None:
        return self._copy(self._users.get(user_id))

    async def find_user_by_reset_token(
        self,
        reset_token: str,
        expiry_gte: datetime,
    ) -> User | None:
        user = self._match_reset_token(reset_token, expiry_gte)
        return self._copy(user)

    async def list_users(self) -> list[User]:
        users = sorted(self._users.values(), key=lambda u: u.created_at)
        return [self._copy(u) for u in users]

    async def create_user(self, user: User) -> User:
        async with self._lock:
            if user.email in self._users_by_email:
                raise DuplicateRecord(f"A user with email {user.email} already exists")
            self._users[user.id] = self._copy(user)
            self._users_by_email[user.email] = user.id
        return self._copy(user)

    async def update_user(self, user_id: str, data: dict[str, Any]) -> User | None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            updated = self._write_user(user, data)
        return self._copy(updated)

    async def consume_reset_token(
        self,
        reset_token: str,
        expiry_gte: datetime,
        data: dict[str, Any],
    ) -> User | None:
        async with self._lock:
            user = self._match_reset_token(reset_token, expiry_gte)
            if user is None:
                return None
            updated = self._write_user(user, {
                **data,
                "reset_token": None,
                "reset_token_expiry": None,
            })
        return self._copy(updated)

    async def clear_reset_token(self, user_id: str, reset_token: str) -> bool:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None or user.reset_token != reset_token:
                return False
            self._write_user(user, {"reset_token": None, "reset_token_expiry": None})
        return True

    def _match_reset_token(self, reset_token: str, expiry_gte: datetime) -> User | None:
        for user in self._users.values():
            if user.reset_token is None or user.reset_token != reset_token:
                continue
            if user.reset_token_expiry is not None and user.reset_token_expiry >= expiry_gte:
                return user
        return None

    def _write_user(self, user: User, data: dict[str, Any]) -> User:
        # Caller holds the lock.
        updated = User.model_validate({
            **user.model_dump(),
            **data,
            "id": user.id,
            "updated_at": utc_now(),
        })
        if updated.email != user.email:
            if updated.email in self._users_by_email:
                raise DuplicateRecord(f"A user with email {updated.email} already exists")
            del self._users_by_email[user.email]
            self._users_by_email[updated.email] = user.id
        self._users[user.id] = updated
        return updated

    # =========================================================================
    # Items
    # =========================================================================

    async def find_item(self, item_id: str) -> Item | None:
        return self._copy(self._items.get(item_id))

    async def list_items(
        self,
        skip: int = 0,
        first: int | None = None,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> list[Item]:
        if order_by not in ITEM_ORDER_FIELDS:
            raise ValueError(f"Cannot order items by {order_by!r}")

        items = sorted(
            self._items.values(),
            key=lambda i: getattr(i, order_by),
            reverse=descending,
        )
        end = skip + first if first is not None else None
        return [self._copy(i) for i in items[skip:end]]

    async def count_items(self) -> int:
        return len(self._items)

    async def create_item(self, item: Item) -> Item:
        async with self._lock:
            self._items[item.id] = self._copy(item)
        return self._copy(item)

    async def update_item(self, item_id: str, data: dict[str, Any]) -> Item | None:
        async with self._lock:
            item = self._items.get(item_id)
            if item is None:
                return None
            updated = Item.model_validate({
                **item.model_dump(),
                **data,
                "id": item.id,
                "user_id": item.user_id,
                "updated_at": utc_now(),
            })
            self._items[item_id] = updated
        return self._copy(updated)

    async def delete_item(self, item_id: str) -> bool:
        async with self._lock:
            if item_id not in self._items:
                return False
            del self._items[item_id]
            for cart_id in [c.id for c in self._cart.values() if c.item_id == item_id]:
                del self._cart[cart_id]
        return True

    # =========================================================================
    # Cart
    # =========================================================================

    async def find_cart_item(self, user_id: str, item_id: str) -> CartItem | None:
        for cart_item in self._cart.values():
            if cart_item.user_id == user_id and cart_item.item_id == item_id:
                return self._copy(cart_item)
        return None

    async def get_cart_item(self, cart_item_id: str) -> CartItem | None:
        return self._copy(self._cart.get(cart_item_id))

    async def list_cart_items(self, user_id: str) -> list[CartItem]:
        rows = [c for c in self._cart.values() if c.user_id == user_id]
        rows.sort(key=lambda c: c.created_at)
        return [self._copy(c) for c in rows]

    async def create_cart_item(self, cart_item: CartItem) -> CartItem:
        async with self._lock:
            for existing in self._cart.values():
                if existing.user_id == cart_item.user_id and existing.item_id == cart_item.item_id:
                    raise DuplicateRecord(
                        f"Cart of {cart_item.user_id} already holds {cart_item.item_id}"
                    )
            self._cart[cart_item.id] = self._copy(cart_item)
        return self._copy(cart_item)

    async def increment_cart_item(self, cart_item_id: str, by: int = 1) -> CartItem | None:
        async with self._lock:
            cart_item = self._cart.get(cart_item_id)
            if cart_item is None:
                return None
            updated = CartItem.model_validate({
                **cart_item.model_dump(),
                "quantity": cart_item.quantity + by,
            })
            self._cart[cart_item_id] = updated
        return self._copy(updated)

    async def delete_cart_item(self, cart_item_id: str) -> bool:
        async with self._lock:
            if cart_item_id in self._cart:
                del self._cart[cart_item_id]
                return True
        return False

    # =========================================================================
    # Internal
    # =========================================================================

    @staticmethod
    def _copy(record):
        return record.model_copy(deep=True) if record is not None else None


# =============================================================================
# Factory
# =============================================================================


def create_local_storage() -> Store:
    """Create an in-memory Store."""
    return InMemoryStore()

"""
Tests for the in-memory store contract.
"""

from datetime import timedelta

import pytest

from storefront.core.models import CartItem, Item
from storefront.core.utils import utc_now
from storefront.errors import DuplicateRecord
from storefront.storage import InMemoryStore

from conftest import add_user


class TestUsers:
    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self):
        store = InMemoryStore()
        user = await add_user(store)

        user.name = "Changed locally"

        assert (await store.find_user_by_id(user.id)).name == "Shopper"

    @pytest.mark.asyncio
    async def test_reset_token_lookup_respects_boundary(self):
        store = InMemoryStore()
        user = await add_user(store)
        expiry = utc_now()
        await store.update_user(user.id, {"reset_token": "tok", "reset_token_expiry": expiry})

        assert await store.find_user_by_reset_token("tok", expiry_gte=expiry) is not None
        assert await store.find_user_by_reset_token("tok", expiry_gte=expiry + timedelta(seconds=1)) is None
        assert await store.find_user_by_reset_token("other", expiry_gte=expiry) is None

    @pytest.mark.asyncio
    async def test_email_change_keeps_index_unique(self):
        store = InMemoryStore()
        a = await add_user(store, email="a@example.com")
        await add_user(store, email="b@example.com")

        with pytest.raises(DuplicateRecord):
            await store.update_user(a.id, {"email": "b@example.com"})

        await store.update_user(a.id, {"email": "c@example.com"})
        assert (await store.find_user_by_email("c@example.com")).id == a.id
        assert await store.find_user_by_email("a@example.com") is None

    @pytest.mark.asyncio
    async def test_update_missing_user(self):
        assert await InMemoryStore().update_user("user_nope", {"name": "x"}) is None

    @pytest.mark.asyncio
    async def test_consume_reset_token_is_single_use(self):
        store = InMemoryStore()
        user = await add_user(store)
        expiry = utc_now()
        await store.update_user(user.id, {"reset_token": "tok", "reset_token_expiry": expiry})

        assert await store.consume_reset_token("other", expiry, {"name": "Wrong"}) is None
        assert (await store.find_user_by_id(user.id)).name == "Shopper"

        consumed = await store.consume_reset_token("tok", expiry, {"name": "Renamed"})
        assert consumed.name == "Renamed"
        assert consumed.reset_token is None
        assert consumed.reset_token_expiry is None

        assert await store.consume_reset_token("tok", expiry, {"name": "Again"}) is None
        assert (await store.find_user_by_id(user.id)).name == "Renamed"

    @pytest.mark.asyncio
    async def test_consume_respects_expiry_boundary(self):
        store = InMemoryStore()
        user = await add_user(store)
        expiry = utc_now()
        await store.update_user(user.id, {"reset_token": "tok", "reset_token_expiry": expiry})

        late = expiry + timedelta(seconds=1)
        assert await store.consume_reset_token("tok", late, {}) is None
        assert (await store.find_user_by_id(user.id)).reset_token == "tok"

    @pytest.mark.asyncio
    async def test_clear_reset_token_only_matching(self):
        store = InMemoryStore()
        user = await add_user(store)
        await store.update_user(user.id, {"reset_token": "current", "reset_token_expiry": utc_now()})

        assert not await store.clear_reset_token(user.id, "stale")
        assert (await store.find_user_by_id(user.id)).reset_token == "current"

        assert await store.clear_reset_token(user.id, "current")
        stored = await store.find_user_by_id(user.id)
        assert stored.reset_token is None
        assert stored.reset_token_expiry is None
        assert not await store.clear_reset_token("user_nope", "current")


class TestCart:
    @pytest.mark.asyncio
    async def test_unique_pair_and_increment(self):
        store = InMemoryStore()
        row = await store.create_cart_item(CartItem(user_id="u1", item_id="i1"))

        with pytest.raises(DuplicateRecord):
            await store.create_cart_item(CartItem(user_id="u1", item_id="i1"))

        bumped = await store.increment_cart_item(row.id, by=3)
        assert bumped.quantity == 4
        assert await store.increment_cart_item("cart_missing") is None

    @pytest.mark.asyncio
    async def test_item_owner_survives_update(self):
        store = InMemoryStore()
        item = await store.create_item(Item(title="t", description="d", price=1, user_id="u1"))

        updated = await store.update_item(item.id, {"user_id": "u2", "title": "new"})

        assert updated.user_id == "u1"
        assert updated.title == "new"

"""
Query resolvers.

Read-only operations. `me` is the one resolver that never fails for
anonymous callers; it returns None instead.
"""

from __future__ import annotations

from storefront.auth.context import RequestContext
from storefront.auth.permissions import PERMISSION_ADMINS, authorize
from storefront.core.models import CartItem, Item, ItemsConnection, UserResponse
from storefront.errors import ValidationFailed, NotFound

DEFAULT_PAGE_SIZE = 4
MAX_PAGE_SIZE = 100


async def me(ctx: RequestContext) -> UserResponse | None:
    if ctx.user is None:
        return None
    user = await ctx.store.find_user_by_id(ctx.user.id)
    return UserResponse.model_validate(user) if user else None


async def users(ctx: RequestContext) -> list[UserResponse]:
    """All users. Caller needs ADMIN or PERMISSIONUPDATE."""
    caller = ctx.require_user()
    authorize(caller, PERMISSION_ADMINS)
    return [UserResponse.model_validate(u) for u in await ctx.store.list_users()]


async def items(
    ctx: RequestContext,
    skip: int = 0,
    first: int = DEFAULT_PAGE_SIZE,
    order_by: str = "-created_at",
) -> list[Item]:
    """
    One page of items.

    `order_by` is a field name, prefixed with "-" for descending
    (created_at, price or title).
    """
    if skip < 0 or not 0 < first <= MAX_PAGE_SIZE:
        raise ValidationFailed(f"Page must satisfy skip >= 0 and 0 < first <= {MAX_PAGE_SIZE}")

    descending = order_by.startswith("-")
    field = order_by.lstrip("-")
    try:
        return await ctx.store.list_items(
            skip=skip,
            first=first,
            order_by=field,
            descending=descending,
        )
    except ValueError as e:
        raise ValidationFailed(str(e))


async def item(ctx: RequestContext, item_id: str) -> Item:
    found = await ctx.store.find_item(item_id)
    if found is None:
        raise NotFound(f"No item found with id {item_id}")
    return found


async def items_connection(ctx: RequestContext) -> ItemsConnection:
    """Aggregate used by the client to paginate."""
    return ItemsConnection(count=await ctx.store.count_items())


async def cart(ctx: RequestContext) -> list[CartItem]:
    """The caller's cart."""
    caller = ctx.require_user()
    return await ctx.store.list_cart_items(caller.id)

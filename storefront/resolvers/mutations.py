"""
Mutation resolvers.

Each resolver takes the request context first, then its arguments,
and either returns a response model or raises a StorefrontError.
Cookie changes are recorded on the context, not written directly.
"""

from __future__ import annotations

import logging
from typing import Iterable

from storefront.auth.context import RequestContext
from storefront.auth.passwords import hash_password, verify_password
from storefront.auth.permissions import ITEM_DELETERS, PERMISSION_ADMINS, authorize, has_permission
from storefront.auth.tokens import (
    create_session_token,
    generate_reset_token,
    reset_lookup_boundary,
    reset_token_expiry,
)
from storefront.core.models import (
    CartItem,
    Item,
    ItemCreate,
    ItemPatch,
    ItemSummary,
    Permission,
    SuccessMessage,
    User,
    UserResponse,
)
from storefront.errors import (
    AuthorizationDenied,
    DuplicateRecord,
    NotFound,
    NotificationFailed,
    TokenInvalidOrExpired,
    ValidationFailed,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Authentication
# =============================================================================


def _start_session(ctx: RequestContext, user: User) -> None:
    token = create_session_token(user.id, ctx.settings)
    ctx.set_session_cookie(token)


async def signup(
    ctx: RequestContext,
    email: str,
    password: str,
    name: str,
) -> UserResponse:
    """Create an account with the USER permission and sign it in."""
    user = User(
        email=email.lower(),
        name=name,
        password=hash_password(password, ctx.settings.password_hash_rounds),
        permissions=[Permission.USER],
    )
    user = await ctx.store.create_user(user)
    logger.info(f"New user signed up: {user.id}")

    _start_session(ctx, user)
    return UserResponse.model_validate(user)


async def signin(ctx: RequestContext, email: str, password: str) -> UserResponse:
    """
    Check credentials and start a session.

    Unknown email and wrong password fail differently (NotFound vs
    ValidationFailed) so the client can tell which one to fix.
    """
    user = await ctx.store.find_user_by_email(email.lower())
    if user is None:
        raise NotFound(f"No such user found for email {email}")

    if not verify_password(password, user.password):
        logger.warning(f"Failed sign-in for user {user.id}")
        raise ValidationFailed("Invalid password!")

    _start_session(ctx, user)
    return UserResponse.model_validate(user)


def signout(ctx: RequestContext) -> SuccessMessage:
    """Clear the session cookie. Safe to call when signed out."""
    ctx.clear_session_cookie()
    return SuccessMessage(message="Goodbye!")


async def request_reset(ctx: RequestContext, email: str) -> SuccessMessage:
    """
    Store a fresh reset token on the user and email them a reset link.

    If the email cannot be delivered (the mailer reports failure or
    raises), the token is cleared again and NotificationFailed is raised.
    A newer token issued meanwhile by another request is left alone.
    """
    user = await ctx.store.find_user_by_email(email.lower())
    if user is None:
        raise NotFound(f"No such user found for email {email}")

    reset_token = generate_reset_token()
    expiry = reset_token_expiry(ctx.now(), ctx.settings)
    await ctx.store.update_user(user.id, {
        "reset_token": reset_token,
        "reset_token_expiry": expiry,
    })
    logger.info(f"Password reset requested for user {user.id}")

    error: Exception | None = None
    sent = False
    if ctx.mailer is not None:
        try:
            sent = await ctx.mailer.send_password_reset(user.email, reset_token)
        except Exception as e:
            error = e

    if not sent:
        await ctx.store.clear_reset_token(user.id, reset_token)
        logger.error(f"Reset email to user {user.id} not delivered; token rolled back: {error}")
        raise NotificationFailed(
            "Could not send the password reset email, please try again"
        ) from error

    return SuccessMessage(message="Thanks!")


async def reset_password(
    ctx: RequestContext,
    password: str,
    confirm_password: str,
    reset_token: str,
) -> UserResponse:
    """Consume a reset token, set the new password and start a session."""
    if password != confirm_password:
        raise ValidationFailed("Your passwords don't match")

    boundary = reset_lookup_boundary(ctx.now(), ctx.settings)
    updated = await ctx.store.consume_reset_token(reset_token, boundary, {
        "password": hash_password(password, ctx.settings.password_hash_rounds),
    })
    if updated is None:
        raise TokenInvalidOrExpired()
    logger.info(f"Password reset completed for user {updated.id}")

    _start_session(ctx, updated)
    return UserResponse.model_validate(updated)


async def update_permissions(
    ctx: RequestContext,
    user_id: str,
    permissions: Iterable[Permission | str],
) -> UserResponse:
    """Replace a user's permissions. Caller needs ADMIN or PERMISSIONUPDATE."""
    caller = ctx.require_user()
    authorize(caller, PERMISSION_ADMINS)

    try:
        new_permissions = list(dict.fromkeys(Permission(p) for p in permissions))
    except ValueError as e:
        raise ValidationFailed(str(e))

    updated = await ctx.store.update_user(user_id, {"permissions": new_permissions})
    if updated is None:
        raise NotFound(f"No user found with id {user_id}")

    logger.info(
        f"User {caller.id} set permissions of {user_id} to "
        f"{[p.value for p in new_permissions]}"
    )
    return UserResponse.model_validate(updated)


# =============================================================================
# Items
# =============================================================================


async def create_item(ctx: RequestContext, data: ItemCreate) -> Item:
    """Create an item owned by the caller."""
    caller = ctx.require_user()
    item = Item(**data.model_dump(), user_id=caller.id)
    return await ctx.store.create_item(item)


async def update_item(ctx: RequestContext, item_id: str, patch: ItemPatch) -> Item:
    """
    Apply an allow-listed patch to an item.

    No ownership check is made here; any caller may update any item.
    """
    item = await ctx.store.update_item(item_id, patch.changes())
    if item is None:
        raise NotFound(f"No item found with id {item_id}")
    return item


async def delete_item(ctx: RequestContext, item_id: str) -> ItemSummary:
    """Delete an item. Caller must own it or hold ADMIN / ITEMDELETE."""
    caller = ctx.require_user()

    item = await ctx.store.find_item(item_id)
    if item is None:
        raise NotFound(f"No item found with id {item_id}")

    owns_item = item.user_id == caller.id
    if not owns_item and not has_permission(caller, ITEM_DELETERS):
        raise AuthorizationDenied("You don't have permission to do that!")

    summary = ItemSummary.model_validate(item)
    await ctx.store.delete_item(item_id)
    logger.info(f"User {caller.id} deleted item {item_id}")
    return summary


# =============================================================================
# Cart
# =============================================================================


async def add_to_cart(ctx: RequestContext, item_id: str) -> CartItem:
    """Add one of an item to the caller's cart, bumping quantity if present."""
    caller = ctx.require_user()

    if await ctx.store.find_item(item_id) is None:
        raise NotFound(f"No item found with id {item_id}")

    existing = await ctx.store.find_cart_item(caller.id, item_id)
    if existing is None:
        try:
            return await ctx.store.create_cart_item(
                CartItem(user_id=caller.id, item_id=item_id)
            )
        except DuplicateRecord:
            # Lost a race with a concurrent add; fall through to increment
            existing = await ctx.store.find_cart_item(caller.id, item_id)
            if existing is None:
                raise

    incremented = await ctx.store.increment_cart_item(existing.id)
    if incremented is None:
        raise NotFound(f"Cart item {existing.id} disappeared")
    return incremented


async def remove_from_cart(ctx: RequestContext, cart_item_id: str) -> CartItem:
    """Remove a line from the caller's own cart."""
    caller = ctx.require_user()

    cart_item = await ctx.store.get_cart_item(cart_item_id)
    if cart_item is None:
        raise NotFound(f"No cart item found with id {cart_item_id}")
    if cart_item.user_id != caller.id:
        raise AuthorizationDenied("That cart item is not yours!")

    await ctx.store.delete_cart_item(cart_item_id)
    return cart_item

"""
Authentication and authorization.

- Sessions ride in an http-only `token` cookie holding a signed JWT
- Permissions are flat labels on the user (ADMIN, ITEMDELETE, ...)
- Every request gets an explicit RequestContext; resolvers never look
  at cookies or globals themselves
"""

from storefront.auth.context import RequestContext, CookieChange
from storefront.auth.permissions import (
    authorize,
    has_permission,
    ITEM_DELETERS,
    PERMISSION_ADMINS,
)
from storefront.auth.passwords import hash_password, verify_password
from storefront.auth.session import SessionMiddleware, get_request_context
from storefront.auth.tokens import (
    create_session_token,
    decode_session_token,
    generate_reset_token,
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
)

__all__ = [
    # Context
    "RequestContext",
    "CookieChange",
    "SessionMiddleware",
    "get_request_context",
    # Guard
    "authorize",
    "has_permission",
    "ITEM_DELETERS",
    "PERMISSION_ADMINS",
    # Passwords / tokens
    "hash_password",
    "verify_password",
    "create_session_token",
    "decode_session_token",
    "generate_reset_token",
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
]

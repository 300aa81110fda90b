"""
Session middleware - turn the `token` cookie into a RequestContext.

Two stages, mirroring how identity is resolved for each request:
1. Decode the cookie into a user id (signature + expiry checked).
2. Load the minimal user projection for that id.

Neither stage ever rejects a request. A missing, tampered or expired
token, or a token for a user that no longer exists, simply leaves the
context anonymous; operations that need identity fail later with
AuthenticationRequired.
"""

from __future__ import annotations

import logging

from fastapi import Request

from storefront.auth.context import RequestContext
from storefront.auth.tokens import TokenError, decode_session_token
from storefront.config import Settings
from storefront.core.models import SessionUser
from storefront.integrations.email import Mailer
from storefront.storage.base import Store

logger = logging.getLogger(__name__)


class SessionMiddleware:
    """Builds per-request contexts for one app."""

    def __init__(self, settings: Settings, store: Store, mailer: Mailer | None = None):
        self.settings = settings
        self.store = store
        self.mailer = mailer

    def resolve_user_id(self, token: str | None) -> str | None:
        """Stage 1: cookie value → user id, or None."""
        if not token:
            return None
        try:
            return decode_session_token(token, self.settings).user_id
        except TokenError as e:
            logger.info(f"Ignoring session token: {e}")
            return None

    async def load_user(self, user_id: str | None) -> SessionUser | None:
        """Stage 2: user id → minimal user projection, or None."""
        if not user_id:
            return None
        user = await self.store.find_user_by_id(user_id)
        if user is None:
            logger.info(f"Session refers to unknown user {user_id}")
            return None
        return SessionUser.model_validate(user)

    async def build_context(self, token: str | None) -> RequestContext:
        """Run both stages and return a fresh context."""
        user_id = self.resolve_user_id(token)
        user = await self.load_user(user_id)
        return RequestContext(
            settings=self.settings,
            store=self.store,
            mailer=self.mailer,
            user_id=user_id,
            user=user,
        )


# =============================================================================
# FastAPI Dependency
# =============================================================================


async def get_request_context(request: Request) -> RequestContext:
    """
    Resolve the context for an HTTP request.

    Usage:
        @app.post("/cart/{item_id}")
        async def add(item_id: str, ctx: RequestContext = Depends(get_request_context)):
            ...
    """
    session: SessionMiddleware = request.app.state.session
    token = request.cookies.get(session.settings.session_cookie_name)
    ctx = await session.build_context(token)

    if ctx.user is not None:
        from storefront.integrations.sentry import set_user
        set_user(ctx.user.id, ctx.user.email)

    return ctx

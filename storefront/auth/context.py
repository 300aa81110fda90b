"""
Request context - who is asking, and what the response should do.

This is the explicit object threaded through every resolver call.
The session middleware builds it once per request; resolvers read
identity from it and record cookie changes on it; the HTTP layer then
applies those changes to the outgoing response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, TYPE_CHECKING

from storefront.config import Settings
from storefront.core.models import SessionUser
from storefront.core.utils import utc_now
from storefront.errors import AuthenticationRequired

if TYPE_CHECKING:
    from fastapi import Response

    from storefront.integrations.email import Mailer
    from storefront.storage.base import Store


@dataclass
class CookieChange:
    """A Set-Cookie (value given) or a clear (value None)."""

    name: str
    value: str | None = None
    max_age: int | None = None


@dataclass
class RequestContext:
    """
    Everything a resolver needs for one request.

    Usage in resolvers:
        async def add_to_cart(ctx: RequestContext, item_id: str):
            user = ctx.require_user()
            ...
    """

    settings: Settings
    store: Store
    mailer: Mailer | None = None

    # Who (filled by the session middleware)
    user_id: str | None = None
    user: SessionUser | None = None

    # Time source for expiry checks
    clock: Callable[[], datetime] = utc_now

    # Cookie changes to apply to the response
    cookies: list[CookieChange] = field(default_factory=list)

    @property
    def is_authenticated(self) -> bool:
        """Is there a resolved, signed-in user?"""
        return self.user is not None

    def now(self) -> datetime:
        return self.clock()

    def require_user(self) -> SessionUser:
        """Return the current user or raise AuthenticationRequired."""
        if self.user is None:
            raise AuthenticationRequired()
        return self.user

    # =========================================================================
    # Session cookie
    # =========================================================================

    def set_session_cookie(self, token: str) -> None:
        self.cookies.append(CookieChange(
            name=self.settings.session_cookie_name,
            value=token,
            max_age=self.settings.session_max_age_seconds,
        ))

    def clear_session_cookie(self) -> None:
        self.cookies.append(CookieChange(name=self.settings.session_cookie_name))

    def apply_cookies(self, response: Response) -> None:
        """Write recorded cookie changes onto a FastAPI/Starlette response."""
        for change in self.cookies:
            if change.value is None:
                response.delete_cookie(
                    change.name,
                    httponly=True,
                    secure=self.settings.session_cookie_secure,
                    samesite=self.settings.session_cookie_samesite,
                )
            else:
                response.set_cookie(
                    change.name,
                    change.value,
                    max_age=change.max_age,
                    httponly=True,
                    secure=self.settings.session_cookie_secure,
                    samesite=self.settings.session_cookie_samesite,
                )

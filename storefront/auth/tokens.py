# =============================================================================
# Session & Reset Tokens
# =============================================================================
#
# Two kinds of token live here:
#   - Session tokens: HS256 JWTs carrying {userId}, valid for one year,
#     sent to the browser in the `token` cookie.
#   - Reset tokens: 20 random bytes, hex encoded, stored on the user
#     record and mailed out as part of a reset link.
#
# =============================================================================

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import secrets

from pydantic import BaseModel
import jwt

from storefront.config import Settings
from storefront.core.utils import utc_now


RESET_TOKEN_BYTES = 20


# =============================================================================
# Models
# =============================================================================

class SessionTokenPayload(BaseModel):
    """Decoded session token."""
    user_id: str
    iat: datetime
    exp: datetime


# =============================================================================
# Errors
# =============================================================================

class TokenError(Exception):
    """Base exception for session token errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid or malformed."""
    pass


# =============================================================================
# Session Tokens
# =============================================================================

def create_session_token(
    user_id: str,
    settings: Settings,
    now: datetime | None = None,
) -> str:
    """Sign a session token for this user."""
    now = now or utc_now()
    payload = {
        "userId": user_id,
        "iat": now,
        "exp": now + timedelta(days=settings.session_max_age_days),
    }
    return jwt.encode(payload, settings.app_secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str, settings: Settings) -> SessionTokenPayload:
    """
    Verify signature and expiry of a session token.

    Raises:
        TokenExpiredError: Token has expired
        TokenInvalidError: Token is invalid or carries no user id
    """
    try:
        payload = jwt.decode(
            token,
            settings.app_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {e}")

    user_id = payload.get("userId")
    if not isinstance(user_id, str) or not user_id:
        raise TokenInvalidError("Token carries no userId")

    return SessionTokenPayload(
        user_id=user_id,
        iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


# =============================================================================
# Reset Tokens
# =============================================================================

def generate_reset_token() -> str:
    """Random, opaque, single-use reset token."""
    return secrets.token_hex(RESET_TOKEN_BYTES)


def reset_token_expiry(issued_at: datetime, settings: Settings) -> datetime:
    """When a token issued at `issued_at` stops being valid."""
    return issued_at + timedelta(minutes=settings.reset_token_ttl_minutes)


def reset_lookup_boundary(now: datetime, settings: Settings) -> datetime:
    """
    Oldest stored expiry that a reset lookup at `now` will still accept.

    The default mirrors the long-standing lookup of `expiry >= now - ttl`,
    which keeps a token usable until two TTLs after issuance. With
    `strict_reset_expiry` the boundary is `now`, i.e. exactly one TTL.
    """
    if settings.strict_reset_expiry:
        return now
    return now - timedelta(minutes=settings.reset_token_ttl_minutes)

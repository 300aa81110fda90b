"""
Tests for tokens, passwords, the permission guard and the session middleware.
"""

from datetime import timedelta

import jwt
import pytest

from storefront.auth.passwords import hash_password, verify_password
from storefront.auth.permissions import authorize, has_permission
from storefront.auth.session import SessionMiddleware
from storefront.auth.tokens import (
    TokenExpiredError,
    TokenInvalidError,
    create_session_token,
    decode_session_token,
    generate_reset_token,
    reset_lookup_boundary,
)
from storefront.core.models import Permission, SessionUser
from storefront.core.utils import utc_now
from storefront.errors import AuthorizationDenied, ValidationFailed

from conftest import add_user


# =============================================================================
# Passwords
# =============================================================================


class TestPasswords:
    def test_hash_verifies(self):
        hashed = hash_password("correct horse", rounds=4)
        assert hashed.startswith("$2b$04$")
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_default_cost_factor(self):
        assert hash_password("pw").startswith("$2b$10$")

    def test_garbage_hash_does_not_verify(self):
        assert not verify_password("pw", "not-a-bcrypt-hash")

    def test_empty_and_oversized_rejected(self):
        with pytest.raises(ValidationFailed):
            hash_password("", rounds=4)
        with pytest.raises(ValidationFailed):
            hash_password("x" * 73, rounds=4)


# =============================================================================
# Tokens
# =============================================================================


class TestSessionTokens:
    def test_round_trip_and_lifetime(self, settings):
        token = create_session_token("user_1", settings)
        payload = decode_session_token(token, settings)

        assert payload.user_id == "user_1"
        assert payload.exp - payload.iat == timedelta(days=365)

    def test_expired(self, settings):
        issued = utc_now() - timedelta(days=400)
        token = create_session_token("user_1", settings, now=issued)
        with pytest.raises(TokenExpiredError):
            decode_session_token(token, settings)

    def test_wrong_secret(self, settings):
        forged = settings.model_copy(update={"app_secret": "attacker"})
        token = create_session_token("user_1", forged)
        with pytest.raises(TokenInvalidError):
            decode_session_token(token, settings)

    def test_missing_user_id(self, settings):
        now = utc_now()
        token = jwt.encode(
            {"sub": "user_1", "iat": now, "exp": now + timedelta(days=1)},
            settings.app_secret,
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalidError):
            decode_session_token(token, settings)


class TestResetTokens:
    def test_random_hex_of_20_bytes(self):
        token = generate_reset_token()
        assert len(token) == 40
        assert bytes.fromhex(token)
        assert generate_reset_token() != token

    def test_lookup_boundary(self, settings, clock):
        now = clock()
        assert reset_lookup_boundary(now, settings) == now - timedelta(hours=1)
        strict = settings.model_copy(update={"strict_reset_expiry": True})
        assert reset_lookup_boundary(now, strict) == now


# =============================================================================
# Permission Guard
# =============================================================================


class TestPermissionGuard:
    def _user(self, *permissions):
        return SessionUser(id="user_1", email="a@example.com", name="A", permissions=list(permissions))

    def test_any_overlap_passes(self):
        user = self._user(Permission.USER, Permission.ITEMDELETE)
        authorize(user, [Permission.ADMIN, Permission.ITEMDELETE])
        assert has_permission(user, ["ITEMDELETE"])

    def test_no_overlap_denied(self):
        user = self._user(Permission.USER)
        with pytest.raises(AuthorizationDenied, match="ADMIN, PERMISSIONUPDATE"):
            authorize(user, [Permission.ADMIN, Permission.PERMISSIONUPDATE])

    def test_anonymous_denied(self):
        assert not has_permission(None, [Permission.USER])
        with pytest.raises(AuthorizationDenied):
            authorize(None, [Permission.USER])

    def test_empty_requirement_denies(self):
        assert not has_permission(self._user(Permission.ADMIN), [])


# =============================================================================
# Session Middleware
# =============================================================================


class TestSessionMiddleware:
    @pytest.mark.asyncio
    async def test_no_cookie_is_anonymous(self, settings, store):
        ctx = await SessionMiddleware(settings, store).build_context(None)
        assert ctx.user_id is None
        assert ctx.user is None
        assert not ctx.is_authenticated

    @pytest.mark.asyncio
    async def test_valid_cookie_attaches_user(self, settings, store):
        user = await add_user(store, permissions=[Permission.USER, Permission.ADMIN])
        token = create_session_token(user.id, settings)

        ctx = await SessionMiddleware(settings, store).build_context(token)

        assert ctx.user_id == user.id
        assert ctx.user == SessionUser(
            id=user.id, email=user.email, name=user.name, permissions=user.permissions,
        )

    @pytest.mark.asyncio
    async def test_tampered_cookie_degrades_to_anonymous(self, settings, store):
        user = await add_user(store)
        token = create_session_token(user.id, settings) + "x"

        ctx = await SessionMiddleware(settings, store).build_context(token)

        assert ctx.user_id is None
        assert ctx.user is None

    @pytest.mark.asyncio
    async def test_expired_cookie_degrades_to_anonymous(self, settings, store):
        user = await add_user(store)
        token = create_session_token(user.id, settings, now=utc_now() - timedelta(days=366))

        ctx = await SessionMiddleware(settings, store).build_context(token)

        assert ctx.user is None

    @pytest.mark.asyncio
    async def test_deleted_user_degrades_to_anonymous(self, settings, store):
        token = create_session_token("user_gone", settings)

        ctx = await SessionMiddleware(settings, store).build_context(token)

        assert ctx.user_id == "user_gone"
        assert ctx.user is None
        assert not ctx.is_authenticated

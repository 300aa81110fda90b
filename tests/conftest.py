"""
Shared fixtures.

Resolver tests build RequestContexts directly; API tests go through
FastAPI's TestClient with the same in-memory store and fake mailer.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from storefront.api.app import create_app
from storefront.auth.context import RequestContext
from storefront.auth.passwords import hash_password
from storefront.config import Settings
from storefront.core.models import Permission, SessionUser, User
from storefront.storage import InMemoryStore


# =============================================================================
# Test doubles
# =============================================================================


class FakeMailer:
    """Records reset emails instead of sending them."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: list[tuple[str, str]] = []

    async def send_password_reset(self, email: str, reset_token: str) -> bool:
        self.sent.append((email, reset_token))
        return self.succeed


class FrozenClock:
    """Controllable time source for expiry tests."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Test settings (cheap bcrypt rounds, fixed secret)."""
    return Settings(
        environment="test",
        app_secret="test-secret",
        frontend_url="http://localhost:7777",
        password_hash_rounds=4,
        sentry_dsn="",
        aws_access_key_id="",
        aws_secret_access_key="",
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def make_ctx(settings, store, mailer, clock):
    """Build a context, optionally signed in as `user`."""

    def _make(user: User | None = None, **overrides) -> RequestContext:
        kwargs = dict(settings=settings, store=store, mailer=mailer, clock=clock)
        kwargs.update(overrides)
        ctx = RequestContext(**kwargs)
        if user is not None:
            ctx.user_id = user.id
            ctx.user = SessionUser.model_validate(user)
        return ctx

    return _make


@pytest.fixture
def client(settings, store, mailer):
    """HTTP client against a fresh app."""
    app = create_app(settings=settings, store=store, mailer=mailer)
    return TestClient(app)


# =============================================================================
# Helpers
# =============================================================================


async def add_user(
    store: InMemoryStore,
    email: str = "shopper@example.com",
    password: str = "hunter2",
    name: str = "Shopper",
    permissions: list[Permission] | None = None,
) -> User:
    """Insert a user straight into the store."""
    return await store.create_user(User(
        email=email,
        name=name,
        password=hash_password(password, rounds=4),
        permissions=permissions or [Permission.USER],
    ))

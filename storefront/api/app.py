"""
FastAPI application for the storefront.

This is the HTTP API the web client talks to. Build it with
`create_app(settings)`; the settings, store and mail transport are
passed in explicitly and kept on `app.state`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.auth.context import RequestContext
from storefront.auth.routes import router as auth_router
from storefront.auth.session import SessionMiddleware, get_request_context
from storefront.config import Settings
from storefront.core.models import (
    CartItem,
    Item,
    ItemCreate,
    ItemPatch,
    ItemsConnection,
    ItemSummary,
)
from storefront.errors import StorefrontError
from storefront.integrations.email import EmailService, Mailer
from storefront.resolvers import mutations, queries
from storefront.resolvers.queries import DEFAULT_PAGE_SIZE
from storefront.storage import Store, create_local_storage

logger = logging.getLogger(__name__)


# =============================================================================
# Exception Handling
# =============================================================================


def setup_exception_handlers(app: FastAPI) -> None:
    """Map StorefrontError subclasses to `{"detail", "code"}` JSON responses."""

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        logger.warning(
            "Storefront error on %s %s: %s (code=%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "code": exc.code},
        )


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    settings: Settings | None = None,
    store: Store | None = None,
    mailer: Mailer | None = None,
) -> FastAPI:
    """
    Build the API.

    Args:
        settings: Configuration; loaded from the environment if omitted
        store: Persistence; an in-memory store if omitted
        mailer: Mail transport; SES-backed EmailService if omitted
    """
    if settings is None:
        from storefront.config import get_settings
        settings = get_settings()

    store = store if store is not None else create_local_storage()
    mailer = mailer if mailer is not None else EmailService(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from storefront.integrations.sentry import init_sentry
        if init_sentry(settings):
            logger.info("Sentry error tracking enabled")

        logger.info(f"Storefront API starting in {settings.environment} mode")
        yield
        logger.info("Storefront API shutting down")

    app = FastAPI(
        title="Storefront API",
        description="Items, cart and accounts for the storefront web client",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.session = SessionMiddleware(settings, store, mailer)

    # The client sends the session cookie cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)
    app.include_router(auth_router)
    register_routes(app)

    return app


# =============================================================================
# Routes
# =============================================================================


def register_routes(app: FastAPI) -> None:

    # -------------------------------------------------------------------------
    # Health Check
    # -------------------------------------------------------------------------

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "storefront-api"}

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    @app.get("/items", response_model=list[Item])
    async def list_items(
        skip: int = 0,
        first: int = DEFAULT_PAGE_SIZE,
        order_by: str = "-created_at",
        ctx: RequestContext = Depends(get_request_context),
    ):
        """One page of items, newest first by default."""
        return await queries.items(ctx, skip=skip, first=first, order_by=order_by)

    @app.get("/items/count", response_model=ItemsConnection)
    async def count_items(ctx: RequestContext = Depends(get_request_context)):
        return await queries.items_connection(ctx)

    @app.get("/items/{item_id}", response_model=Item)
    async def get_item(item_id: str, ctx: RequestContext = Depends(get_request_context)):
        return await queries.item(ctx, item_id)

    @app.post("/items", response_model=Item, status_code=201)
    async def create_item(
        data: ItemCreate,
        ctx: RequestContext = Depends(get_request_context),
    ):
        """Create an item owned by the signed-in user."""
        return await mutations.create_item(ctx, data)

    @app.patch("/items/{item_id}", response_model=Item)
    async def update_item(
        item_id: str,
        patch: ItemPatch,
        ctx: RequestContext = Depends(get_request_context),
    ):
        return await mutations.update_item(ctx, item_id, patch)

    @app.delete("/items/{item_id}", response_model=ItemSummary)
    async def delete_item(item_id: str, ctx: RequestContext = Depends(get_request_context)):
        """Delete an item (owner, ADMIN or ITEMDELETE only)."""
        return await mutations.delete_item(ctx, item_id)

    # -------------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------------

    @app.get("/cart", response_model=list[CartItem])
    async def get_cart(ctx: RequestContext = Depends(get_request_context)):
        return await queries.cart(ctx)

    @app.post("/cart/{item_id}", response_model=CartItem)
    async def add_to_cart(item_id: str, ctx: RequestContext = Depends(get_request_context)):
        """Add one of an item; repeated adds bump the quantity."""
        return await mutations.add_to_cart(ctx, item_id)

    @app.delete("/cart/{cart_item_id}", response_model=CartItem)
    async def remove_from_cart(
        cart_item_id: str,
        ctx: RequestContext = Depends(get_request_context),
    ):
        return await mutations.remove_from_cart(ctx, cart_item_id)

# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   1. Create a Python project at sentry.io
#   2. Copy DSN to .env: SENTRY_DSN=https://...@sentry.io/...
#
# Usage:
#   init_sentry(settings) is called from the app lifespan
#   (storefront/api/app.py).
#
# =============================================================================

import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from storefront.config import Settings
from storefront.errors import StorefrontError

logger = logging.getLogger(__name__)

# Expected client errors; not worth an event
IGNORED_STATUS_CODES = (401, 403, 404, 422)

SENSITIVE_HEADERS = ("authorization", "cookie", "set-cookie")


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry error tracking.

    Returns True if initialized, False if skipped.
    """
    if not settings.sentry_dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        send_default_pii=False,
        before_send=_filter_events,
        before_send_transaction=_filter_transactions,
    )

    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def _filter_events(event: dict, hint: dict) -> dict | None:
    """Filter out noisy or sensitive events."""
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]

        if isinstance(exc_value, StorefrontError):
            if exc_value.status_code in IGNORED_STATUS_CODES:
                return None

        from fastapi import HTTPException
        if isinstance(exc_value, HTTPException):
            if exc_value.status_code in IGNORED_STATUS_CODES:
                return None

    # Session cookies and reset links must never leave the process
    request = event.get("request")
    if request and "headers" in request:
        headers = request["headers"]
        for key in list(headers.keys()):
            if key.lower() in SENSITIVE_HEADERS:
                headers[key] = "[Filtered]"
    if request and "cookies" in request:
        request["cookies"] = "[Filtered]"

    return event


def _filter_transactions(event: dict, hint: dict) -> dict | None:
    """Filter out noisy transactions."""
    if event.get("transaction", "") in ("/health", "health_check"):
        return None
    return event


def set_user(user_id: str, email: str | None = None) -> None:
    """Set the current user context for error reports (no-op when disabled)."""
    sentry_sdk.set_user({"id": user_id, "email": email})

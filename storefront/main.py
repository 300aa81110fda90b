"""
Storefront API - main entry point.

Reads settings from the environment (and .env) once, then serves the
app with uvicorn:

    python -m storefront.main
"""

from __future__ import annotations

import logging

import uvicorn

from storefront.api.app import create_app
from storefront.config import get_settings


def main():
    """Main entry point."""
    settings = get_settings()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(settings)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()

"""
FastAPI application entrypoint for the OAuth relay.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from oauth_relay.api.routes import router as api_router
from oauth_relay.core.config import get_settings
from oauth_relay.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="OAuth Relay",
        version="0.1.0",
        description=(
            "Brokers authorization-code, client-credential and refresh grants "
            "for clients that cannot hold a client secret."
        ),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(api_router)
    return app


app = create_app()

__all__ = ["app", "create_app"]

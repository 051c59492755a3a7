"""
FastAPI application entrypoint for activity cards.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from activity_cards import __version__
from activity_cards.api.pages import router as pages_router
from activity_cards.api.routes import router as api_router
from activity_cards.core.config import get_settings
from activity_cards.core.logging import configure_logging

STATIC_DIR = Path(__file__).resolve().parent / "static"


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Activity Cards",
        version=__version__,
        description="Sign in with Strava and turn activities into shareable images.",
    )
    app.include_router(api_router, prefix="/api")
    app.include_router(pages_router)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    return app


app = create_app()

__all__ = ["app", "create_app"]

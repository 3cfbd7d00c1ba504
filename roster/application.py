"""Application factory that serves both the record API and the web interface."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from .api import create_app as create_api_app
from .client import UsersAPIClient
from .config import Settings
from .database import Database
from .web import create_app as create_web_app

logger = logging.getLogger("roster.application")


def create_application(
    *,
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    api_client: Optional[UsersAPIClient] = None,
) -> FastAPI:
    """Create the combined ASGI application."""

    if settings is None:
        settings = Settings.from_env()

    if database is None:
        database = Database(settings.database_path)
    database.initialize()

    api_app = create_api_app(database=database, allowed_origins=settings.allowed_origins)
    web_app = create_web_app(
        api_client=api_client,
        api_base_url=settings.resolved_api_base_url(),
        session_secret=settings.resolved_session_secret(),
    )

    app = FastAPI(
        title="Roster",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.database = database
    app.state.settings = settings
    app.state.api = api_app
    app.state.web = web_app

    app.mount("/api", api_app)
    app.mount("/", web_app)

    logger.info("Roster application configured with database %s", database.path)
    return app


__all__ = ["create_application"]

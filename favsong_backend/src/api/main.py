"""
FastAPI application entrypoint for the Favorite Song Manager backend.

Pages (session required unless noted):
- GET /, GET /about
- GET /login (public), GET /auth/twitch, GET /auth/twitch/callback, GET /logout

JSON API (session required):
- GET /songs
- POST /favorite

Run with:
    uvicorn src.api.main:create_app --factory --app-dir favsong_backend
or the `favsong-server` console script.
"""

from __future__ import annotations

import logging
import os as _os
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.api.catalog import Catalog, load_catalog
from src.api.config import Settings, load_settings
from src.api.db import init_db
from src.api.exception_handlers import register_exception_handlers
from src.api.oauth import TwitchOAuthClient
from src.api.routes_auth import router as auth_router
from src.api.routes_songs import router as songs_router
from src.api.sessions import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Songs", "description": "Catalog listing and per-user favorites (session required)."},
    {"name": "Auth", "description": "Twitch login, session cookie and logout."},
    {"name": "Health", "description": "Service health and basic runtime info."},
]


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    *,
    catalog: Optional[Catalog] = None,
    session_store: Optional[SessionStore] = None,
    oauth_client: Optional[TwitchOAuthClient] = None,
) -> FastAPI:
    """
    Build the application.

    Every collaborator defaults to the production one built from `settings`;
    the catalog file is read here, once.
    """
    settings = settings or load_settings()
    catalog = catalog if catalog is not None else load_catalog(settings.songs_tsv)
    if session_store is None:
        session_store = InMemorySessionStore(max_age=timedelta(minutes=settings.session_max_age_minutes))
    oauth_client = oauth_client or TwitchOAuthClient(settings)

    if settings.db_auto_create:
        init_db()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        oauth_client.close()

    app = FastAPI(
        title="Favorite Song Manager API",
        description=(
            "Browse a fixed song catalog and keep a personal list of favorites.\n\n"
            "Authentication: Twitch OAuth login, then a server-side session referenced by an "
            "HttpOnly cookie. API clients without a session get 401 JSON; browsers are "
            "redirected to /login."
        ),
        version="1.0.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.catalog = catalog
    app.state.session_store = session_store
    app.state.oauth_client = oauth_client

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(auth_router)
    app.include_router(songs_router)

    @app.get(
        "/health",
        summary="Health check",
        description="Simple health check endpoint.",
        tags=["Health"],
    )
    def health_check(request: Request):
        """Return basic service health information."""
        return {"status": "ok", "songs": len(request.app.state.catalog)}

    return app


def _configure_logging() -> None:
    logging.basicConfig(
        level=_os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# PUBLIC_INTERFACE
def run() -> None:
    """Serve the app with uvicorn on $HOST:$PORT (default 0.0.0.0:3000)."""
    import uvicorn

    _configure_logging()
    uvicorn.run(
        "src.api.main:create_app",
        factory=True,
        host=_os.getenv("HOST", "0.0.0.0"),
        port=int(_os.getenv("PORT", "3000")),
    )


if __name__ == "__main__":
    run()

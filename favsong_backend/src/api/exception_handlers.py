"""
Maps domain errors to HTTP responses.

- Unauthorized      -> 302 /login for browsers, 401 JSON otherwise
- AuthenticationFailed -> 401 "Authentication failed." page
- InvalidSongId     -> 400 JSON
- PersistenceError  -> 500 JSON
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from src.api.auth import wants_html
from src.api.errors import AuthenticationFailed, FavSongError, InvalidSongId, PersistenceError, Unauthorized

logger = logging.getLogger(__name__)

AUTH_FAILED_TEXT = "Authentication failed."


def _error_json(status_code: int, exc: FavSongError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": exc.error_code, "message": exc.message},
    )


# PUBLIC_INTERFACE
def auth_failed_response() -> PlainTextResponse:
    """Generic page shown when the OAuth handshake fails."""
    return PlainTextResponse(AUTH_FAILED_TEXT, status_code=status.HTTP_401_UNAUTHORIZED)


# PUBLIC_INTERFACE
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for the FavSongError taxonomy on `app`."""

    @app.exception_handler(Unauthorized)
    async def unauthorized_handler(request: Request, exc: Unauthorized) -> Response:
        if wants_html(request):
            return RedirectResponse("/login", status_code=status.HTTP_302_FOUND)
        return _error_json(status.HTTP_401_UNAUTHORIZED, exc)

    @app.exception_handler(AuthenticationFailed)
    async def authentication_failed_handler(request: Request, exc: AuthenticationFailed) -> Response:
        logger.warning("oauth_failed: path=%s error=%s message=%s", request.url.path, exc.error_code, exc.message)
        return auth_failed_response()

    @app.exception_handler(InvalidSongId)
    async def invalid_song_handler(request: Request, exc: InvalidSongId) -> Response:
        logger.info("invalid_song_id: path=%s song_id=%r", request.url.path, exc.song_id)
        return _error_json(status.HTTP_400_BAD_REQUEST, exc)

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError) -> Response:
        # The failing module already logged the traceback.
        logger.error("persistence_error: path=%s message=%s", request.url.path, exc.message)
        return _error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)

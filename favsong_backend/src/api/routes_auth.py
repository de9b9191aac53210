"""
Login/logout endpoints:
- GET /login
- GET /auth/twitch
- GET /auth/twitch/callback
- GET /logout
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse, Response
from starlette.status import HTTP_302_FOUND

from src.api.auth import (
    SESSION_COOKIE,
    clear_session_cookie,
    optional_user,
    read_session_token,
    set_session_cookie,
)
from src.api.config import Settings
from src.api.dependencies import get_oauth_client, get_session_store, get_settings
from src.api.errors import AuthenticationFailed, PersistenceError
from src.api.exception_handlers import auth_failed_response
from src.api.favorites import upsert_user
from src.api.oauth import TwitchOAuthClient
from src.api.sessions import SessionStore, SessionUser
from src.api.views import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.get(
    "/login",
    summary="Login page",
    description="Redirects to / when already logged in, otherwise shows the login page.",
    operation_id="login_page",
)
def login_page(request: Request, user: Optional[SessionUser] = Depends(optional_user)) -> Response:
    if user is not None:
        return RedirectResponse("/", status_code=HTTP_302_FOUND)
    return templates.TemplateResponse(request, "login.html", {})


@router.get(
    "/auth/twitch",
    summary="Start Twitch login",
    description="Redirects the browser to the Twitch authorize page.",
    operation_id="twitch_login",
)
def twitch_login(oauth: TwitchOAuthClient = Depends(get_oauth_client)) -> RedirectResponse:
    return RedirectResponse(oauth.authorize_url())


@router.get(
    "/auth/twitch/callback",
    summary="Twitch OAuth callback",
    description="Exchanges the code, stores the user, starts a session and redirects to /.",
    operation_id="twitch_callback",
)
def twitch_callback(
    request: Request,
    code: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
    oauth: TwitchOAuthClient = Depends(get_oauth_client),
) -> Response:
    """Complete the OAuth handshake. Any failure shows the generic failure page; nothing is retried."""
    if not code:
        # User denied consent or opened the URL directly.
        return RedirectResponse("/login", status_code=HTTP_302_FOUND)

    try:
        profile = oauth.authenticate(code)
        upsert_user(profile)
    except (AuthenticationFailed, PersistenceError) as exc:
        logger.warning("oauth_callback_failed: error=%s message=%s", exc.error_code, exc.message)
        return auth_failed_response()

    # Drop any previous session carried by this browser before issuing a new one.
    previous = read_session_token(request.cookies.get(SESSION_COOKIE), secret=settings.session_secret)
    if previous:
        store.destroy(previous)

    record = store.create(SessionUser(id=profile.id, login=profile.login, display_name=profile.display_name))
    logger.info("login_succeeded: user_id=%s login=%s", profile.id, profile.login)

    response = RedirectResponse("/", status_code=HTTP_302_FOUND)
    set_session_cookie(response, record, settings)
    return response


@router.get(
    "/logout",
    summary="Log out",
    description="Destroys the session and redirects to /login.",
    operation_id="logout",
)
def logout(
    request: Request,
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
) -> RedirectResponse:
    token = read_session_token(request.cookies.get(SESSION_COOKIE), secret=settings.session_secret)
    if token:
        store.destroy(token)

    response = RedirectResponse("/login", status_code=HTTP_302_FOUND)
    clear_session_cookie(response)
    return response
